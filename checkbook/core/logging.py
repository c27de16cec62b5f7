"""
Logging configuration module.

This module provides structured logging configuration with support for:
- Console logging (development)
- Rotating file logging with a separate error file
- JSON logging via python-json-logger (for log aggregation)
- Request correlation ids on every record
"""

import logging
import logging.config
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from checkbook.core.config import settings

# Set by RequestIDMiddleware for the duration of a request
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

APP_LOGGER = "checkbook"


def setup_logging() -> None:
    """
    Configure application logging based on environment settings.

    Call this function at application startup, before any logging occurs.
    """
    if settings.log_file_enabled:
        log_dir = Path(settings.log_file_path).parent
        log_dir.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_config())

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured: level={settings.log_level}, "
        f"format={settings.log_format}, "
        f"file_enabled={settings.log_file_enabled}"
    )


def get_logging_config() -> dict[str, Any]:
    """
    Get logging configuration dictionary.

    Returns:
        Dictionary compatible with logging.config.dictConfig()
    """
    formatter = "json" if settings.log_format == "json" else "detailed"

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": (
                    "%(asctime)s - %(name)s - %(levelname)s - "
                    "[%(correlation_id)s] - %(funcName)s() - %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": (
                    "%(asctime)s %(name)s %(levelname)s %(correlation_id)s "
                    "%(funcName)s %(message)s"
                ),
            },
        },
        "filters": {
            "correlation_id": {
                "()": CorrelationIdFilter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": formatter,
                "stream": sys.stdout,
                "filters": ["correlation_id"],
            },
        },
        "root": {
            "level": settings.log_level,
            "handlers": ["console"],
        },
        "loggers": {
            "uvicorn": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "WARNING",  # INFO echoes SQL
                "handlers": ["console"],
                "propagate": False,
            },
            APP_LOGGER: {
                "level": settings.log_level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    if settings.log_file_enabled:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.log_level,
            "formatter": formatter,
            "filename": settings.log_file_path,
            "maxBytes": settings.log_file_max_bytes,
            "backupCount": settings.log_file_backup_count,
            "encoding": "utf-8",
            "filters": ["correlation_id"],
        }

        config["handlers"]["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": formatter,
            "filename": str(Path(settings.log_file_path).parent / "error.log"),
            "maxBytes": settings.log_file_max_bytes,
            "backupCount": settings.log_file_backup_count,
            "encoding": "utf-8",
            "filters": ["correlation_id"],
        }

        config["root"]["handlers"].extend(["file", "error_file"])
        config["loggers"][APP_LOGGER]["handlers"].extend(["file", "error_file"])

    return config


class CorrelationIdFilter(logging.Filter):
    """
    Logging filter to add correlation_id to log records.

    The correlation id is the request id stored in ``request_id_ctx`` by the
    request middleware. Records emitted outside a request get 'no-request-id'.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = request_id_ctx.get() or "no-request-id"
        return True
