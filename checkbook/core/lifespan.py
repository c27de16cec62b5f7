import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from checkbook.core import settings
from checkbook.core.database import (
    close_database_connection,
    create_database_engine,
    create_sessionmaker,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Lifespan Context Manager
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    """
    Lifespan context manager for startup and shutdown events.

    Handles:
    - Database engine creation and session factory in app.state
    - Resource cleanup on shutdown
    """
    logger.info(f"Starting {settings.app_name} v{settings.version}")
    logger.info(f"Environment: {settings.environment}")

    engine = create_database_engine()
    app.state.sessionmaker = create_sessionmaker(engine)

    logger.info("Sessionmaker created successfully")

    yield

    logger.info("Shutting down application")
    await close_database_connection(engine)
    app.state.sessionmaker = None
