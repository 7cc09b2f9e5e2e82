"""Logging configuration.

Records may carry context fields through ``extra`` (the request id set by the
API middleware, an ``ErrorCode`` on failures, the plan a write touched). The
JSON formatter emits them as top-level keys; the plain formatter appends them
as ``key=value`` pairs.
"""

import logging
import sys
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from formulary_service.config import settings

CONTEXT_FIELDS = ("request_id", "plan_id", "code")


class ContextFormatter(logging.Formatter):
    """Plain-text formatter that appends known context fields when present."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = [
            f"{field}={getattr(record, field)}"
            for field in CONTEXT_FIELDS
            if getattr(record, field, None) is not None
        ]
        if context:
            line = f"{line} [{' '.join(context)}]"
        return line


def build_formatter(environment: str) -> logging.Formatter:
    """Formatter for the given deployment environment."""
    if environment == "production":
        return jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
            static_fields={"service": settings.app_name},
        )
    return ContextFormatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def get_logger(name: str) -> logging.Logger:
    """Get configured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger writing to stdout at the configured level
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(build_formatter(settings.environment))
        logger.addHandler(handler)
        logger.setLevel(settings.log_level)

    return logger


def log_event(logger: logging.Logger, event: str, **payload: Any) -> None:
    """Emit a structured event record at INFO."""
    structured: Dict[str, Any] = {"event": event, **payload}
    logger.info(structured)
