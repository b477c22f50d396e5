"""Rate limiting middleware for the MEPCalc API."""

import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Iterable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

DEFAULT_EXEMPT_PATHS = ("/api/health",)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding-window limiter keyed by client address.

    Each client may make `requests_per_minute` requests per `window_seconds`.
    Paths in `exempt_paths` are never counted. Idle clients are forgotten
    every `cleanup_interval` seconds.
    """

    def __init__(
        self,
        app,
        requests_per_minute: int = 120,
        window_seconds: float = 60.0,
        exempt_paths: Iterable[str] = DEFAULT_EXEMPT_PATHS,
        cleanup_interval: float = 300.0,
    ):
        super().__init__(app)
        self.limit = requests_per_minute
        self.window = window_seconds
        self.exempt_paths = frozenset(exempt_paths)
        self.cleanup_interval = cleanup_interval
        self._hits: Dict[str, Deque[float]] = {}
        self._next_cleanup = time.monotonic() + cleanup_interval

    @staticmethod
    def client_key(request: Request) -> str:
        """First X-Forwarded-For hop, else the socket peer."""
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
        return request.client.host if request.client else "unknown"

    def _forget_idle(self, now: float) -> None:
        if now < self._next_cleanup:
            return
        self._next_cleanup = now + self.cleanup_interval
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= now - self.window]
        for key in idle:
            del self._hits[key]

    def allow(self, key: str, now: float) -> bool:
        """Count a request for `key`; False once the window is full."""
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - self.window:
            hits.popleft()
        if len(hits) >= self.limit:
            return False
        hits.append(now)
        return True

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exempt_paths:
            return await call_next(request)

        now = time.monotonic()
        self._forget_idle(now)
        key = self.client_key(request)
        if self.allow(key, now):
            return await call_next(request)

        logger.warning("Rate limit exceeded for %s on %s", key, request.url.path)
        # Returned rather than raised: BaseHTTPMiddleware bypasses the app's exception handlers
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded. Please wait before trying again."},
            headers={"Retry-After": str(int(self.window))},
        )
