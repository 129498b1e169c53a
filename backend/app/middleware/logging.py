"""
Library API — Request Logging Middleware
==========================================

What:  One access-log line per HTTP request.
How:   Measures wall time around the downstream app and logs method, path,
       query, status and duration, tagged with the request id.
When:  After RequestIDMiddleware (uses the request id for correlation).

Example:
    GET /api/authors?orderBy=age%20desc&pageSize=5 200 12.4ms [a1b2c3d4] from 10.0.0.7

Request bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("library.access")


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with its outcome and duration.

    Health checks are skipped; probes hit them every few seconds.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        target = f"{path}?{request.url.query}" if request.url.query else path

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        rid = request_id_var.get("")
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            target,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
