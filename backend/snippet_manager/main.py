"""
Snippet Manager Backend: FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() wires engine, stores, services and
       middleware together and returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn snippet_manager.main:app) and by tests,
       which pass their own engine and token service.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                         FastAPI App                          │
    │                                                              │
    │  Middleware Chain (outermost first):                         │
    │  ┌──────┐ ┌────────┐ ┌─────────┐ ┌───────────┐               │
    │  │ CORS │→│ Req ID │→│ Logging │→│ Auth Gate │               │
    │  └──────┘ └────────┘ └─────────┘ └───────────┘               │
    │                                                              │
    │  Routes:                                                     │
    │  /register /login /health          (public)                  │
    │  /snippets /tags /folders          (bearer token)            │
    │                                                              │
    │  Exception Handlers:                                         │
    │  Validation→400 │ Auth→401 │ NotFound→404 │ Duplicate→409    │
    │  Storage→500    │ anything else→500                          │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Create missing tables
    Key ring validation runs earlier, in create_app(); a misconfigured ring
    stops the process at import.
    Shutdown:
    1. Dispose the database engine
"""

import logging
import secrets
import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException

from snippet_manager import __version__
from snippet_manager.config import Settings, settings
from snippet_manager.database import (
    build_session_factory,
    dispose_engine,
    init_schema,
)
from snippet_manager.database import engine as default_engine
from snippet_manager.exceptions import (
    AuthError,
    SnippetManagerError,
    StorageError,
    ValidationError,
)
from snippet_manager.middleware.auth import AuthGateMiddleware
from snippet_manager.middleware.logging import RequestLoggingMiddleware
from snippet_manager.middleware.request_id import RequestIDMiddleware, request_id_var
from snippet_manager.routes import auth, folders, health, snippets, tags
from snippet_manager.security import PasswordHasher, TokenService
from snippet_manager.services.credential_service import CredentialService
from snippet_manager.stores import (
    SqlAlchemyFolderStore,
    SqlAlchemySnippetStore,
    SqlAlchemyTagStore,
    SqlAlchemyUserStore,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-06-01T12:00:00 [INFO] snippet_manager.stores.snippets: message
    Request ids are added by the log calls themselves ("[%s] ...").
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Snippet Manager %s starting up...", __version__)

    logger.info("Signing tokens with key id '%s'", app.state.token_service.active_key_id)
    await init_schema(app.state.engine)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Snippet Manager shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError          → 400 (with details)
        RequestValidationError   → 400 (malformed JSON, bad UUID, missing field)
        AuthError                → 401 (+ WWW-Authenticate: Bearer)
        StorageError             → 500 (generic message; driver error logged)
        SnippetManagerError      → its own status_code / error_code
        HTTPException            → its status (unknown route 404, wrong method 405)
        Exception (fallback)     → 500

    Bodies never carry stack traces, SQL or driver messages.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body(exc.error_code, exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        if errors:
            first = errors[0]
            message = f"Invalid request: {'.'.join(first['loc'])}: {first['msg']}"
        else:
            message = "Invalid request"
        logger.warning("[%s] %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=_error_body(ValidationError.error_code, message, {"errors": errors}),
        )

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        return JSONResponse(
            status_code=401,
            content=_error_body(exc.error_code, exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(exc.error_code, exc.message),
        )

    @app.exception_handler(SnippetManagerError)
    async def handle_app_error(request: Request, exc: SnippetManagerError):
        if exc.status_code >= 500:
            logger.error("[%s] %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = {404: "not_found", 405: "method_not_allowed"}.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(error, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again later.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_token_service(config: Settings = settings) -> TokenService:
    """
    Token service from settings.

    With no key ring configured an ephemeral key is generated: tokens then
    stop verifying whenever the process restarts. A ring whose active id is
    not one of its keys raises ValueError.
    """
    config.validate_key_ring()
    keys = dict(config.jwt_signing_keys)
    active_key_id = config.jwt_active_key_id
    if not keys:
        active_key_id = "ephemeral"
        keys = {active_key_id: secrets.token_urlsafe(32)}
        logger.warning(
            "JWT_SIGNING_KEYS is not configured; signing tokens with an ephemeral key"
        )
    return TokenService(
        signing_keys=keys,
        active_key_id=active_key_id,
        algorithm=config.jwt_algorithm,
        ttl=timedelta(minutes=config.access_token_ttl_minutes),
    )


def create_app(
    engine: Optional[AsyncEngine] = None,
    token_service: Optional[TokenService] = None,
    hasher: Optional[PasswordHasher] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        engine:        database engine (default: the DATABASE_URL engine)
        token_service: token signer/verifier (default: from JWT_* settings)
        hasher:        password hasher (default: BCRYPT_ROUNDS work factor)
    """
    app = FastAPI(
        title="Snippet Manager API",
        description="Store, tag and organize code snippets in folders.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    engine = engine or default_engine
    token_service = token_service or build_token_service()
    hasher = hasher or PasswordHasher(rounds=settings.bcrypt_rounds)
    session_factory = build_session_factory(engine)

    app.state.engine = engine
    app.state.token_service = token_service
    app.state.user_store = SqlAlchemyUserStore(session_factory)
    app.state.snippet_store = SqlAlchemySnippetStore(session_factory)
    app.state.tag_store = SqlAlchemyTagStore(session_factory)
    app.state.folder_store = SqlAlchemyFolderStore(session_factory)
    app.state.credential_service = CredentialService(
        user_store=app.state.user_store,
        hasher=hasher,
        token_service=token_service,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → Request ID → Logging → Auth Gate
    app.add_middleware(AuthGateMiddleware, token_service=token_service)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    # Outermost so preflight requests never meet the auth gate
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "WWW-Authenticate"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(snippets.router)
    app.include_router(tags.router)
    app.include_router(folders.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: `snippet-manager`."""
    uvicorn.run(
        "snippet_manager.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
