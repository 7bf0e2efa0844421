"""
Snippet Manager Backend: Auth Gate Middleware
=============================================

What:  Validates the bearer token of every request to a protected path
       before any route handler (and so any store) is reached.
How:   Per-request state machine, no state kept between requests:

           no Authorization header          → 401 "Authorization header missing"
           header but no bearer token       → 401 "Token missing"
           token invalid / bad sig / expired → 401 "Invalid token" | "Token expired"
           token valid                       → forwarded, principal on request.state

       A rejection also records its reason on request.state.auth_failure for
       the access log, which runs outside the gate.

       The first two states reject before any parsing is attempted.
       Verification is synchronous and performs no I/O.

Why a middleware writes its own response:
    Starlette runs exception handlers inside the middleware stack, so an
    exception raised here would bypass them. The gate therefore builds the
    same JSON error envelope the handlers in main.py produce.
"""

import logging
from typing import Iterable, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from snippet_manager.exceptions import AuthError
from snippet_manager.middleware.request_id import request_id_var
from snippet_manager.security import Principal, TokenService

logger = logging.getLogger(__name__)

DEFAULT_PROTECTED_PREFIXES: Tuple[str, ...] = ("/snippets", "/tags", "/folders")


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header value.

    Raises:
        AuthError: header absent, or present without a bearer token.
    """
    if not authorization:
        raise AuthError("Authorization header missing")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Token missing")
    return token.strip()


class AuthGateMiddleware(BaseHTTPMiddleware):
    """
    Rejects unauthenticated requests to protected path prefixes.

    Args:
        token_service:       verifies tokens against the configured key ring
        protected_prefixes:  paths equal to, or nested under, any of these
                             require a valid token
    """

    def __init__(
        self,
        app,
        token_service: TokenService,
        protected_prefixes: Iterable[str] = DEFAULT_PROTECTED_PREFIXES,
    ):
        super().__init__(app)
        self._tokens = token_service
        self._prefixes = tuple(p.rstrip("/") for p in protected_prefixes)

    def is_protected(self, path: str) -> bool:
        return any(path == p or path.startswith(p + "/") for p in self._prefixes)

    def authenticate(self, request: Request) -> Principal:
        token = extract_bearer_token(request.headers.get("Authorization"))
        return self._tokens.verify(token)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.is_protected(request.url.path):
            return await call_next(request)

        try:
            principal = self.authenticate(request)
        except AuthError as e:
            rid = request_id_var.get("")
            request.state.auth_failure = e.message
            logger.warning(
                "[%s] Rejected %s %s: %s", rid, request.method, request.url.path, e.message
            )
            return JSONResponse(
                status_code=401,
                content={
                    "error": AuthError.error_code,
                    "message": e.message,
                    "request_id": rid,
                },
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.principal = principal
        return await call_next(request)
