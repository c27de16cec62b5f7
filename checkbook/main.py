"""
FastAPI application entry point.

This module sets up:
- FastAPI application with middleware
- Exception handlers
- API routes
- CORS configuration
"""

import logging

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from checkbook.api.routes import (
    account_permissions,
    accounts,
    audit_logs,
    health,
    permission_requests,
)
from checkbook.core import settings
from checkbook.core.exceptions import AppException
from checkbook.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    validation_exception_handler,
)
from checkbook.core.lifespan import lifespan
from checkbook.core.logging import setup_logging
from checkbook.core.middleware import RequestIDMiddleware, RequestLoggingMiddleware

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the application with handlers, middleware and routers."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description=settings.description,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # ========================================================================
    # Exception Handlers
    # ========================================================================
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)

    # ========================================================================
    # Middleware Setup (last added runs first)
    # ========================================================================
    # 1. Request logging middleware (sees request_id set by the next one)
    app.add_middleware(RequestLoggingMiddleware)

    # 2. Request ID middleware (outermost of the two)
    app.add_middleware(RequestIDMiddleware)

    # 3. CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========================================================================
    # API Routes
    # ========================================================================
    v1_router = APIRouter(prefix="/v1")
    v1_router.include_router(accounts.router)
    v1_router.include_router(account_permissions.router)
    v1_router.include_router(audit_logs.router)
    v1_router.include_router(permission_requests.router)

    api_router = APIRouter(prefix="/api")
    api_router.include_router(v1_router)

    app.include_router(health.router)
    app.include_router(api_router)

    return app


app = create_app()
