from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Awaitable, Callable, Deque, Dict

import structlog
from fastapi import Request, Response, status

from universe.errors import error_response

logger = structlog.get_logger(__name__)


class RateLimiter:
    def __init__(self, limit: int, window: float) -> None:
        self.limit = limit
        self.window = window
        self.bucket: Dict[str, Deque[float]] = {}
        self._lock = Lock()
        self._last_sweep = time.monotonic()

    def _sweep(self, window_start: float) -> None:
        # drop keys whose hits have all expired
        stale = [key for key, buf in self.bucket.items() if not buf or buf[-1] < window_start]
        for key in stale:
            del self.bucket[key]

    def hit(self, key: str) -> bool:
        """Return True if allowed, False if over limit."""
        now = time.monotonic()
        window_start = now - self.window
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(window_start)
                self._last_sweep = now
            buf = self.bucket.setdefault(key, deque())
            # drop old timestamps
            while buf and buf[0] < window_start:
                buf.popleft()
            if len(buf) >= self.limit:
                return False
            buf.append(now)
            return True


def _client_ip(request: Request, *, trust_forwarded: bool = False) -> str:
    if trust_forwarded:
        first = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        if first:
            return first
    if request.client:
        return request.client.host or "unknown"
    return "unknown"


def rate_limit_middleware(
    limiter: RateLimiter,
    *,
    prefix: str = "/api/",
    trust_forwarded: bool = False,
) -> Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]:
    async def middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        path = request.url.path
        if not path.startswith(prefix):
            return await call_next(request)

        ip = _client_ip(request, trust_forwarded=trust_forwarded)
        if not limiter.hit(ip):
            logger.warning("rate_limited", ip=ip, path=path)
            return error_response(
                "Too many requests. Please slow down.",
                "RATE_LIMITED",
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            )

        return await call_next(request)

    return middleware


__all__ = ["RateLimiter", "rate_limit_middleware"]
