"""FastAPI application factory.

Learn: App factory pattern — create_app(settings) returns a configured
FastAPI instance. Everything built from settings (storage, token codec,
auth service, access gate) is constructed here once and hung on
app.state; routes reach it through small Depends() getters instead of
module globals.

Lifespan creates the schema at startup (CREATE TABLE IF NOT EXISTS) and
disposes the store at shutdown.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasklist import __version__
from tasklist.api import api_router
from tasklist.auth.dependencies import AccessGate
from tasklist.auth.jwt import TokenCodec
from tasklist.config import Settings, get_settings
from tasklist.errors import AppError, Unauthorized
from tasklist.services.auth_service import AuthService
from tasklist.storage import build_storage

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "tasklist.starting",
        version=__version__,
        environment=settings.environment,
        storage=settings.storage_backend,
        port=settings.port,
    )

    await app.state.storage.init_schema()
    logger.info("tasklist.schema_ready")

    yield

    logger.info("tasklist.shutdown")
    await app.state.storage.close()


def _error_response(code: str, status_code: int, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"error": <code>} — never a traceback."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return _error_response(exc.code, exc.status_code, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error_response("invalid_input", 400)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("request.unhandled_error", path=request.url.path)
        return _error_response("server_error", 500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="tasklist",
        description="Authenticated per-user task lists with stateless session tokens",
        version=__version__,
        lifespan=lifespan,
    )

    storage = build_storage(settings)
    tokens = TokenCodec(settings.jwt_secret, default_ttl_seconds=settings.token_ttl_seconds)
    app.state.settings = settings
    app.state.storage = storage
    app.state.tokens = tokens
    app.state.auth_service = AuthService(storage, tokens)
    app.state.gate = AccessGate(tokens)

    register_exception_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    from tasklist.middleware.request_id import RequestIdMiddleware
    from tasklist.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: tasklist.main:app)
app = create_app()
