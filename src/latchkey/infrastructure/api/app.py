"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from latchkey.core.config import Settings, get_settings
from latchkey.core.logging import bind_correlation_id, clear_context, configure_logging, get_logger
from latchkey.domain.exceptions import AuthError, ConflictError
from latchkey.infrastructure.auth import (
    ConsumedTokenStore,
    DatabaseConsumedTokenStore,
    InMemoryConsumedTokenStore,
    NullSessionRegistry,
    PersistedSessionRegistry,
    SessionRegistry,
    TokenService,
)
from latchkey.infrastructure.persistence.database import (
    DatabaseManager,
    close_database,
    get_db_manager,
    init_database,
)
from latchkey.infrastructure.services import EmailService

logger = get_logger(__name__)


def build_token_service(settings: Settings, db: DatabaseManager) -> TokenService:
    """Build the token service with the revocation backends selected in settings."""
    consumed_store: ConsumedTokenStore
    if settings.consumed_token_store == "database":
        consumed_store = DatabaseConsumedTokenStore(db.session_factory)
    else:
        consumed_store = InMemoryConsumedTokenStore()

    session_registry: SessionRegistry
    if settings.session_registry == "database":
        session_registry = PersistedSessionRegistry(db.session_factory)
    else:
        session_registry = NullSessionRegistry()

    logger.info(
        "Token service configured",
        consumed_token_store=settings.consumed_token_store,
        session_registry=settings.session_registry,
    )
    return TokenService.from_settings(
        settings,
        consumed_store=consumed_store,
        session_registry=session_registry,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: database setup and teardown."""
    settings: Settings = app.state.settings

    logger.info(
        "Starting Latchkey",
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database(settings)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down Latchkey")
    await close_database()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Defaults to the cached application settings.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Authentication and session service",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    db = get_db_manager(settings)
    app.state.settings = settings
    app.state.token_service = build_token_service(settings, db)
    app.state.email_service = EmailService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_health_check(app)
    register_routes(app, settings)
    register_exception_handlers(app, settings)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register the health check endpoint."""

    @app.get("/health", tags=["health"])
    async def health_check():
        """Returns 200 if the service is running."""
        return {
            "status": "healthy",
            "service": app.state.settings.app_name,
            "version": app.state.settings.app_version,
        }


def register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes."""
    from latchkey.infrastructure.api.routes import auth_router

    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Register exception handlers.

    Auth errors become ``{"error": kind, "message": message}`` bodies; any
    other exception becomes a generic 500.
    """

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
        content = {"error": exc.kind, "message": exc.message}
        if isinstance(exc, ConflictError) and exc.field:
            content["field"] = exc.field

        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "InternalError",
                "message": str(exc) if settings.debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register request logging with correlation IDs."""

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info("Request started", method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()
