"""
Health Check Endpoints
"""

import logging
from typing import Any

from fastapi import APIRouter, Request

from checkbook.core.config import settings
from checkbook.core.database import check_database_connection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check() -> dict[str, str]:
    """
    Basic health check endpoint.

    Returns:
        Basic application information and status
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness_check(request: Request) -> dict[str, Any]:
    """
    Readiness check endpoint.

    Verifies database connectivity.
    """
    db_healthy = await check_database_connection(request.app.state.sessionmaker)

    return {
        "status": "ready" if db_healthy else "degraded",
        "app": settings.app_name,
        "version": settings.version,
        "checks": {
            "database": "ok" if db_healthy else "ko",
        },
    }
