"""
StackIt Backend — Rate Limiting Middleware
============================================

What:  Per-client sliding window rate limiter.
Why:   Voting and view registration are cheap to spam; this caps how many
       requests one client address can make per window.
How:   One deque of request timestamps per client. Expired timestamps are
       popped from the left on every request, so each check costs only the
       entries that actually fell out of the window.

Single-process only: state lives in memory. Multi-worker deployments need a
shared store (e.g. Redis INCR with TTL).
"""

import logging
import time
from collections import deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from stackit.config import settings
from stackit.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Forget idle clients after this many tracked requests
_SWEEP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Limits come from settings.rate_limit_requests / settings.rate_limit_window.
    /health and the API docs are never limited.
    """

    UNLIMITED_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._windows: Dict[str, Deque[float]] = {}
        self._since_sweep = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.UNLIMITED_PATHS:
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        now = time.monotonic()
        horizon = now - settings.rate_limit_window

        window = self._windows.setdefault(client, deque())
        while window and window[0] <= horizon:
            window.popleft()

        if len(window) >= settings.rate_limit_requests:
            retry_after = int(window[0] - horizon) + 1
            logger.warning(
                "Rate limit hit by %s on %s %s (%d requests / %ds)",
                client,
                request.method,
                request.url.path,
                len(window),
                settings.rate_limit_window,
            )
            return self._too_many_requests(RateLimitExceededError(retry_after=retry_after))

        window.append(now)
        self._since_sweep += 1
        if self._since_sweep >= _SWEEP_EVERY:
            self._sweep(horizon)

        return await call_next(request)

    @staticmethod
    def _too_many_requests(exc: RateLimitExceededError) -> JSONResponse:
        # Exceptions raised from BaseHTTPMiddleware skip the app's handlers
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": exc.message,
                "details": exc.context,
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    def _sweep(self, horizon: float) -> None:
        idle = [client for client, window in self._windows.items() if not window or window[-1] <= horizon]
        for client in idle:
            del self._windows[client]
        self._since_sweep = 0
        if idle:
            logger.debug("Dropped rate-limit state for %d idle clients", len(idle))
