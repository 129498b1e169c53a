"""
Library API — Request ID Middleware
=====================================

What:  Assigns a correlation id to each request and echoes it as X-Request-ID.
How:   Uses the client's X-Request-ID when present, otherwise a short UUID;
       stores it in a ContextVar so loggers and exception handlers can read it.
When:  First middleware in the chain.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local; concurrent requests share a thread
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
