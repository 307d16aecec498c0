"""
In-memory rate limiting for sensitive endpoints (test logins, order writes).

Sliding window per (client IP, route path). State lives in the process, so
limits are per worker.
"""
import time
import logging
from collections import defaultdict, deque
from typing import Callable

from fastapi import Request

from domain.errors import RateLimitError

logger = logging.getLogger(__name__)


class SlidingWindowLimiter:
    """
    Sliding-window request counter.

    `clock` is injectable so tests can advance time without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def _evict(self, key: str, window_seconds: int) -> deque[float]:
        cutoff = self._clock() - window_seconds
        hits = self._hits[key]
        while hits and hits[0] <= cutoff:
            hits.popleft()
        return hits

    def hit(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """Record a request for `key`; False (and nothing recorded) once the window is full."""
        hits = self._evict(key, window_seconds)
        if len(hits) >= max_requests:
            return False
        hits.append(self._clock())
        return True

    def remaining(self, key: str, max_requests: int, window_seconds: int) -> int:
        return max(0, max_requests - len(self._evict(key, window_seconds)))

    def reset(self) -> None:
        self._hits.clear()


limiter = SlidingWindowLimiter()


def rate_limit(max_requests: int = 10, window_seconds: int = 60):
    """
    FastAPI dependency factory.

    Usage:
        @router.post("/test-login")
        async def login(..., _rate=Depends(rate_limit(20, 60))):
            ...
    """
    async def _enforce(request: Request):
        client_ip = request.client.host if request.client else "unknown"
        key = f"{client_ip}:{request.url.path}"

        if not limiter.hit(key, max_requests, window_seconds):
            logger.warning(
                f"Rate limit exceeded: {client_ip} on {request.url.path} "
                f"({max_requests}/{window_seconds}s)"
            )
            raise RateLimitError(
                f"Rate limit exceeded. Maximum {max_requests} requests "
                f"per {window_seconds} seconds. Try again later.",
                retry_after=window_seconds,
                details={"limit": max_requests, "windowSeconds": window_seconds},
            )

    return _enforce
