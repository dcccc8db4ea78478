"""
FastAPI Application Entry Point.

This is the main entry point for the notepad backend.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from modules.backend.api import health
from modules.backend.api.rest import router as api_router
from modules.backend.core.concurrency import shutdown_pools
from modules.backend.core.config import get_app_config
from modules.backend.core.database import Database
from modules.backend.core.exception_handlers import register_exception_handlers
from modules.backend.core.logging import get_logger, setup_logging
from modules.backend.core.middleware import RequestContextMiddleware
from modules.backend.core.storage import FileStorage

logger = get_logger(__name__)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    app_config = get_app_config()
    setup_logging()

    await app.state.database.create_all()
    app.state.file_storage.ensure_root()

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
            "upload_dir": str(app.state.file_storage.root),
        },
    )
    yield
    logger.info("Application shutting down")

    await app.state.database.dispose()
    await shutdown_pools()


def create_app(
    database: Database | None = None,
    file_storage: FileStorage | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Persistence store; built from database.yaml when omitted
        file_storage: Attachment storage; built from storage.yaml when omitted
    """
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

    app.state.database = database or Database.from_config()
    app.state.file_storage = file_storage or FileStorage.from_config()

    app.add_middleware(RequestContextMiddleware)

    cors_origins = app_settings.cors.origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["Content-Disposition", "X-Request-ID"],
        )

    register_exception_handlers(app)

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(api_router, prefix="/api")

    return app


def get_app() -> FastAPI:
    """
    Get the application instance (lazy initialization).

    Use this instead of importing `app` directly to avoid
    import-time configuration errors.
    """
    global _app
    if _app is None:
        _app = create_app()
    return _app


# For uvicorn: `uvicorn modules.backend.main:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
