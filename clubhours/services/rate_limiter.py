# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Sliding-window rate limiter.

One instance per tier (auth / read / write). Keys are ``ip:<addr>`` or
``member:<id>``; each key remembers the timestamps of its accepted requests
inside the current window. Rejected requests are not recorded, so a client
hammering the API is let through again as soon as its oldest hit expires.
"""
import threading
import time
from collections import deque
from typing import NamedTuple, Optional


class RateDecision(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int


class SlidingWindowRateLimiter:
    def __init__(self, max_requests: int, window_seconds: int = 60, name: str = ""):
        self.max_requests = max_requests
        self.window = window_seconds
        self.name = name
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def is_allowed(self, key: str, now: Optional[float] = None) -> RateDecision:
        now = time.monotonic() if now is None else now
        cutoff = now - self.window
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.max_requests:
                return RateDecision(False, 0, max(1, int(hits[0] - cutoff) + 1))
            hits.append(now)
            return RateDecision(True, self.max_requests - len(hits), 0)

    def prune(self, now: Optional[float] = None) -> int:
        """Forget keys with no hit inside the window; returns how many were dropped."""
        now = time.monotonic() if now is None else now
        cutoff = now - self.window
        with self._lock:
            idle = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
            for key in idle:
                del self._hits[key]
        return len(idle)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
