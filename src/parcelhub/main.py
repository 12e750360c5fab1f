"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from parcelhub.api import router
from parcelhub.api.errors import register_exception_handlers
from parcelhub.config import Settings, settings
from parcelhub.db import Database
from parcelhub.services.platform_loader import PlatformRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting %s...", app.title)
    await app.state.database.create_all()

    yield

    # Shutdown
    logger.info("Shutting down...")
    await app.state.database.dispose()


def create_app(
    config: Settings | None = None,
    database: Database | None = None,
    platforms: PlatformRegistry | None = None,
) -> FastAPI:
    """Build the application and the resources it owns."""
    config = config or settings

    app = FastAPI(
        title=config.app_name,
        description="Parcel handover tracking for Lazada and Shopee",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.database = database or Database(config.database_url, echo=config.debug)
    app.state.platforms = platforms or PlatformRegistry(config.platforms_dir)
    app.state.platforms.load_all()
    logger.info("Loaded %d platform profiles", len(app.state.platforms.list_profiles()))

    register_exception_handlers(app)
    app.include_router(router)

    return app


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "parcelhub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
