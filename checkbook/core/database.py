"""
Database connection and session management.

This module provides async database session management using SQLAlchemy 2.0.
PostgreSQL (asyncpg) is the production backend and uses a connection pool;
SQLite (aiosqlite) is supported for local runs and the test suite.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool

from checkbook.core.config import settings

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Database Engine Configuration
# -----------------------------------------------------------------------------


def create_database_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create async database engine.

    Args:
        database_url: Database URL. If None, uses settings.database_url

    Returns:
        Configured AsyncEngine instance

    Connection Pool Configuration (PostgreSQL):
        - pool_size: Number of permanent connections (default: 5)
        - max_overflow: Additional connections under load (default: 10)
        - pool_pre_ping: Test connection before use (default: True)
        - pool_recycle: Recycle connections after N seconds (default: 3600)
    """
    url = database_url or settings.database_url

    logger.info("Initializing database engine...")

    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=settings.debug,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_transactions(engine)
        logger.info("Database engine created: sqlite (static pool)")
        return engine

    engine = create_async_engine(
        url,
        echo=settings.debug,  # Log SQL queries in debug mode
        echo_pool=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=settings.db_pool_recycle,
        pool_timeout=settings.db_pool_timeout,
        poolclass=AsyncAdaptedQueuePool,
        connect_args={
            "server_settings": {
                "application_name": f"{settings.app_name} - {settings.environment}",
            },
        },
    )

    logger.info(
        f"Database engine created: pool_size={settings.db_pool_size}, "
        f"max_overflow={settings.db_max_overflow}"
    )

    return engine


def _enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy own BEGIN on SQLite so SAVEPOINTs work, and turn on
    foreign key enforcement (needed for ON DELETE CASCADE).
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory used for one session per request."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# -----------------------------------------------------------------------------
# Session Dependency
# -----------------------------------------------------------------------------


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a database session.

    The sessionmaker is created by the application lifespan and stored in
    app.state. Uncommitted work is rolled back when the request ends.
    """
    sessionmaker: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with sessionmaker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def check_database_connection(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> bool:
    """Run a trivial query to verify connectivity."""
    try:
        async with sessionmaker() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


# -----------------------------------------------------------------------------
# Lifecycle Management
# -----------------------------------------------------------------------------


async def close_database_connection(engine: AsyncEngine) -> None:
    """
    Close database engine and dispose of connection pool.

    Should be called on application shutdown to gracefully close
    all database connections.
    """
    try:
        await engine.dispose()
        logger.info("Database engine disposed successfully")
    except Exception as e:
        logger.error(f"Error disposing database engine: {e}")
        # Don't raise - we're shutting down anyway
