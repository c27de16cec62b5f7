"""
Exception handlers for FastAPI application.

This module provides:
- Custom application exception handler (AppException)
- Pydantic validation error handler (RequestValidationError)
- General unhandled exception handler (Exception)
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from checkbook.core.config import settings
from checkbook.core.exceptions import AppException

logger = logging.getLogger(__name__)


def _error_body(request: Request, code: str, message: str, details: Any) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
        "meta": {
            "request_id": getattr(request.state, "request_id", None),
        },
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Converts AppException to proper HTTP responses with consistent format.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application exception: {exc.error_code} - {exc.message} "
        f"(request_id={getattr(request.state, 'request_id', 'unknown')})"
    )

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.error_code, exc.message, exc.details),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to consistent error response format.
    """
    logger.warning(
        f"Validation error: {exc.errors()} "
        f"(request_id={getattr(request.state, 'request_id', 'unknown')})"
    )

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(request, "VALIDATION_ERROR", "Request validation failed", errors),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full error and returns a generic error response to the client.
    """
    logger.error(
        f"Unexpected error: {str(exc)} "
        f"(request_id={getattr(request.state, 'request_id', 'unknown')})",
        exc_info=True,
    )

    message = (
        "An unexpected error occurred. Please contact support."
        if not settings.debug
        else str(exc)
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, "INTERNAL_ERROR", message, {}),
    )
