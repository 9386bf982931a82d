"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, docchat.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docchat import __version__
from docchat.api.deps.dependencies import get_service_cache
from docchat.boundary.db.connection import dispose_engine
from docchat.boundary.db.create_tables import create_all_tables
from docchat.configs import get_settings
from docchat.observability.logger import configure_logging
from docchat.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import chat_router, documents_router, health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger("uvicorn")

    # Startup
    if settings.database.is_sqlite:
        await create_all_tables()

    logger.info("Pre-warming service cache...")
    cache = get_service_cache()
    # Trigger property access to load instances
    _ = cache.ingestion_coordinator
    _ = cache.chat_service
    logger.info("Service cache pre-warmed")

    yield

    # Shutdown
    await cache.aclose()
    await dispose_engine()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Document ingestion and conversational query orchestration",
        version=__version__,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")
    app.include_router(chat_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "docchat.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
