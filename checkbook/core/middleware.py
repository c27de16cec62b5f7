"""
Custom middleware for FastAPI application.

This module provides:
- Request ID generation and tracking
- Request/response logging
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from checkbook.core.logging import request_id_ctx

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to generate and track request IDs.

    Reuses an incoming X-Request-ID header when the caller sends one,
    otherwise generates a UUID. The id is stored in request.state.request_id,
    published to the logging correlation filter and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_ctx.set(request_id)

        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all incoming requests and outgoing responses.

    Log format:
    - INFO: Successful requests (2xx, 3xx)
    - WARNING: Client errors (4xx)
    - ERROR: Server errors (5xx)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"
        request_id = getattr(request.state, "request_id", "unknown")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"Request failed: {method} {path} - "
                f"request_id={request_id} client={client_host} "
                f"duration={duration:.3f}s error={str(e)}",
                exc_info=True,
            )
            raise

        duration = time.perf_counter() - start_time
        status_code = response.status_code
        log_message = (
            f"{method} {path} {status_code} - "
            f"request_id={request_id} client={client_host} "
            f"duration={duration:.3f}s"
        )

        if status_code < 400:
            logger.info(log_message)
        elif status_code < 500:
            logger.warning(log_message)
        else:
            logger.error(log_message)

        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response
