# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
HTTP Middleware: request ID propagation, Prometheus metrics and tiered
rate limiting.
"""

import time
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from clubhours.core.config import settings
from clubhours.core.logging import get_logger
from clubhours.core.security import decode_access_token
from clubhours.metrics import HTTP_ERRORS, RATE_LIMITED, REQUEST_COUNT, REQUEST_LATENCY
from clubhours.services.rate_limiter import SlidingWindowRateLimiter

logger = get_logger(__name__)

SKIP_PATHS: tuple[str, ...] = (
    "/health", "/health/ready", "/metrics", "/openapi.json", "/docs", "/redoc",
)

RATE_LIMIT_BODY = {
    "success": False,
    "error": ("Rate limit exceeded. You are making too many requests. "
              "Please slow down and try again in a few moments."),
    "code": "RATE_LIMIT_EXCEEDED",
}

_limiters: dict[str, SlidingWindowRateLimiter] = {
    "auth": SlidingWindowRateLimiter(*settings.RATE_LIMIT_AUTH, name="auth"),
    "read": SlidingWindowRateLimiter(*settings.RATE_LIMIT_READ, name="read"),
    "write": SlidingWindowRateLimiter(*settings.RATE_LIMIT_WRITE, name="write"),
}

# Idle keys are dropped every PRUNE_EVERY limited requests.
PRUNE_EVERY = 1000
_seen = 0


def reset_rate_limits() -> None:
    for limiter in _limiters.values():
        limiter.reset()


def _maybe_prune() -> None:
    global _seen
    _seen += 1
    if _seen % PRUNE_EVERY == 0:
        dropped = sum(limiter.prune() for limiter in _limiters.values())
        logger.debug("Rate limiter pruned %d idle keys", dropped)


def _endpoint_label(request: Request) -> str:
    """Route template rather than raw path, so ids don't explode label cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or generate X-Request-ID for distributed tracing."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Track request count, latency, and error rate via Prometheus."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration = time.time() - start

        if request.url.path not in SKIP_PATHS:
            endpoint = _endpoint_label(request)
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status=str(response.status_code),
            ).inc()
            REQUEST_LATENCY.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(duration)
            if response.status_code >= 400:
                HTTP_ERRORS.labels(
                    method=request.method,
                    endpoint=endpoint,
                    status=str(response.status_code),
                ).inc()

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Three tiers:
        auth   login and password endpoints, keyed by client IP
        read   GET under /api, keyed by member id
        write  everything else under /api, keyed by member id
    Requests without a valid token fall back to the client IP.
    """

    @staticmethod
    def _client_ip(request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _tier_and_key(self, request: Request) -> tuple[str, str] | None:
        path = request.url.path
        if path in settings.AUTH_PATHS:
            return "auth", self._client_ip(request)
        if not path.startswith("/api/"):
            return None
        tier = "read" if request.method in ("GET", "HEAD") else "write"
        member_id = None
        auth_header = request.headers.get("Authorization", "")
        if auth_header.lower().startswith("bearer "):
            member_id = decode_access_token(auth_header[7:].strip())
        key = f"member:{member_id}" if member_id else f"ip:{self._client_ip(request)}"
        return tier, key

    async def dispatch(self, request: Request, call_next):
        if (
            not settings.RATE_LIMIT_ENABLED
            or request.method == "OPTIONS"
            or request.url.path in settings.RATE_LIMIT_BYPASS
        ):
            return await call_next(request)

        tier_and_key = self._tier_and_key(request)
        if tier_and_key is None:
            return await call_next(request)
        tier, key = tier_and_key
        limiter = _limiters[tier]
        allowed, remaining, retry_after = limiter.is_allowed(key)
        _maybe_prune()

        if not allowed:
            RATE_LIMITED.labels(tier=tier).inc()
            return JSONResponse(
                status_code=429,
                content=RATE_LIMIT_BODY,
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(limiter.max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )
        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limiter.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
