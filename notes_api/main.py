"""
FastAPI Application Entry Point.

This is the main entry point for the notes API service.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from notes_api.api import health
from notes_api.api.v1 import router as api_v1_router
from notes_api.core.config import get_app_config
from notes_api.core.database import Database
from notes_api.core.exception_handlers import register_exception_handlers
from notes_api.core.logging import get_logger, setup_logging
from notes_api.core.middleware import RequestContextMiddleware

logger = get_logger(__name__)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Owns the database handle: built and pinged at startup, disposed at
    shutdown. Startup fails if the database does not answer in time.
    """
    app_config = get_app_config()
    setup_logging()

    database = Database.from_config()
    timeout = app_config.application.timeouts.startup_check
    try:
        await database.ping(timeout=timeout)
    except (TimeoutError, SQLAlchemyError, OSError) as e:
        logger.critical(
            "Database unreachable at startup",
            extra={"timeout": timeout, "error": str(e) or type(e).__name__},
        )
        await database.dispose()
        raise

    app.state.database = database
    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
        },
    )
    try:
        yield
    finally:
        logger.info("Application shutting down")
        await database.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app_config = get_app_config()
    app_settings = app_config.application

    app = FastAPI(
        title=app_settings.name,
        description=app_settings.description,
        version=app_settings.version,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)

    cors_origins = app_settings.cors.origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_v1_router, prefix=app_settings.api_prefix)

    return app


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    This function creates the app on first call and caches it.
    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn notes_api.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
