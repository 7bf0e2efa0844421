"""
Snippet Manager Backend: Access Log Middleware
==============================================

What:  One access-log line per request, tagged with who made it:

           GET /snippets 200 3.1ms [a1b2c3d4e5f6] user=6f1c… from 10.0.0.7
           GET /snippets 401 0.4ms [0f9e8d7c6b5a] rejected by auth gate from 10.0.0.7

How:   Runs outside the auth gate, so it sees the gate's decision on the
       shared request state after the call returns:
           - request.state.principal     → the authenticated user id
           - request.state.auth_failure  → the gate turned the request away
       Gate rejections are logged at INFO: the gate has already written the
       WARNING with the reason. Everything else follows the status class
       (5xx ERROR, 4xx WARNING, else INFO).

Never logged: request bodies (passwords, code) and the Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snippet_manager.middleware.request_id import request_id_var

logger = logging.getLogger("snippet_manager.access")

UNLOGGED_PATHS = frozenset({"/health"})


def access_level(status: int, rejected_by_gate: bool) -> int:
    if rejected_by_gate:
        return logging.INFO
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def describe_caller(request: Request) -> str:
    """`user=<id>`, `rejected by auth gate` or `anonymous`."""
    principal = getattr(request.state, "principal", None)
    if principal is not None:
        return f"user={principal.user_id}"
    if getattr(request.state, "auth_failure", None):
        return "rejected by auth gate"
    return "anonymous"


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        principal = getattr(request.state, "principal", None)
        rejected = bool(getattr(request.state, "auth_failure", None))
        client_ip = request.client.host if request.client else "unknown"

        logger.log(
            access_level(response.status_code, rejected),
            "%s %s %d %.1fms [%s] %s from %s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id_var.get(),
            describe_caller(request),
            client_ip,
            extra={
                "user_id": str(principal.user_id) if principal else None,
                "auth_rejected": rejected,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
