"""
Application lifecycle events
Handles startup and shutdown tasks
"""

from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from .database import close_db
from .cache import cache
from .monitoring import setup_logging
from .config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events

    Schema creation and seed data are not done here; they belong to the
    explicit initialisation step (python -m storefront.initial_data).
    """
    try:
        setup_logging()
        logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

        await cache.connect()
        logger.info("Cache connected")

        yield

    finally:
        logger.info(f"Shutting down {settings.APP_NAME}...")

        await close_db()
        await cache.disconnect()

        logger.info("Shutdown complete")
