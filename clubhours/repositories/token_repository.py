# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Password-reset tokens.
In-memory and process-local; a restart invalidates every outstanding link.
"""

import threading
import time
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ResetToken:
    token: str
    user_id: str
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now


class ResetTokenStore:
    """At most one live token per user, guarded by a lock."""

    def __init__(self) -> None:
        self._tokens: dict[str, ResetToken] = {}
        self._by_user: dict[str, str] = {}
        self._lock = threading.Lock()

    # ── Write ──

    def put(self, token: str, user_id: str, ttl_seconds: int,
            now: Optional[float] = None) -> ResetToken:
        now = time.time() if now is None else now
        entry = ResetToken(token=token, user_id=user_id, created_at=now,
                           expires_at=now + ttl_seconds)
        with self._lock:
            previous = self._by_user.pop(user_id, None)
            if previous is not None:
                self._tokens.pop(previous, None)
            self._tokens[token] = entry
            self._by_user[user_id] = token
        return entry

    def delete_by_key(self, token: str) -> Optional[ResetToken]:
        with self._lock:
            entry = self._tokens.pop(token, None)
            if entry is not None and self._by_user.get(entry.user_id) == token:
                del self._by_user[entry.user_id]
        return entry

    def delete_by_user_id(self, user_id: str) -> None:
        with self._lock:
            token = self._by_user.pop(user_id, None)
            if token is not None:
                self._tokens.pop(token, None)

    def cleanup_expired(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        with self._lock:
            expired = [t for t, e in self._tokens.items() if e.is_expired(now)]
            for token in expired:
                entry = self._tokens.pop(token)
                if self._by_user.get(entry.user_id) == token:
                    del self._by_user[entry.user_id]
        return len(expired)

    # ── Read ──

    def get_by_key(self, token: str, now: Optional[float] = None) -> Optional[ResetToken]:
        """Live token or None; an expired token is evicted on lookup."""
        now = time.time() if now is None else now
        with self._lock:
            entry = self._tokens.get(token)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._tokens[token]
                if self._by_user.get(entry.user_id) == token:
                    del self._by_user[entry.user_id]
                return None
            return entry

    def count(self) -> int:
        with self._lock:
            return len(self._tokens)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()
            self._by_user.clear()
