"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import get_settings
from app.core.exceptions import register_exception_handlers
from app.core.health import router as health_router
from app.core.logging import configure_logging, get_logger
from app.core.middleware import RequestIdMiddleware
from app.features.feed_sources.routes import router as feed_sources_router
from app.features.jobs.routes import router as jobs_router
from app.features.photo_import.routes import router as photo_import_router
from app.features.photos.routes import router as photos_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown.

    Args:
        _app: FastAPI application instance (unused, required by lifespan protocol).

    Yields:
        None after startup.
    """
    settings = get_settings()

    configure_logging()
    logger.info(
        "app.startup_completed",
        app_name=settings.app_name,
        app_env=settings.app_env,
        debug=settings.debug,
    )

    yield

    logger.info("app.shutdown_completed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Media RSS photo ingestion service",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(feed_sources_router)
    app.include_router(photos_router)
    app.include_router(photo_import_router)
    app.include_router(jobs_router)

    return app


app = create_app()
