"""
StackIt Backend — Request Logging Middleware
==============================================

What:  One access-log line per HTTP request on the "stackit.access" logger.
Never logged: request bodies (question and answer text) and Authorization headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from stackit.middleware.request_id import request_id_var

access_logger = logging.getLogger("stackit.access")

QUIET_PATHS = frozenset({"/health"})


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, query, status, duration and request ID; probes are skipped."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        access_logger.log(
            _level_for(response.status_code),
            "[%s] %s %s -> %d (%.1fms)",
            request_id_var.get(""),
            request.method,
            target,
            response.status_code,
            elapsed_ms,
            extra={
                "request_id": request_id_var.get(""),
                "http_method": request.method,
                "http_path": request.url.path,
                "http_status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )

        return response
