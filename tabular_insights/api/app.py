"""
FastAPI application for Tabular Insights.

Main entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tabular_insights import __version__
from tabular_insights.api.exceptions import register_exception_handlers
from tabular_insights.api.routes import health
from tabular_insights.api.routes import router as api_router
from tabular_insights.core.config import Settings, get_settings
from tabular_insights.core.logging import configure_logging
from tabular_insights.storage.postgres.connection import db, init_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Opens the database engine and applies the schema on startup.
    """
    settings: Settings = app.state.settings

    db.init(settings)

    try:
        await init_database()
    except Exception as e:
        logger.warning(f"Could not initialize database: {e}")

    logger.info(f"Tabular Insights API v{__version__} started ({settings.environment})")

    yield

    await db.close()
    logger.info("Application shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Tabular Insights API",
        description="Upload CSV/Excel files, get summary statistics and ask an AI about the data",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api")
    app.include_router(health.router)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Tabular Insights API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tabular_insights.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug
    )
