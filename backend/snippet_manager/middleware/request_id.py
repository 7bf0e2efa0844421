"""
Snippet Manager Backend: Request ID Middleware
==============================================

What:  Assigns a correlation id to each request and echoes it back in the
       X-Request-ID response header.
How:   A client-supplied X-Request-ID is reused only when it is a short token
       of letters, digits, '.', '_' or '-'; anything else (or nothing) gets a
       fresh 12-hex-char id. Client ids end up in log lines and error bodies,
       so they must not carry spaces or control characters.

       The id lives in `request_id_var` for the duration of the request and
       is reset afterwards. The access log, the auth gate and the exception
       handlers in main.py read it from there.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(client_value: Optional[str]) -> str:
    """The client's id when it is well-formed, otherwise a new one."""
    if client_value and _CLIENT_ID_PATTERN.fullmatch(client_value):
        return client_value
    return uuid.uuid4().hex[:12]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
