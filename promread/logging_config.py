"""Logging configuration for promread."""

import logging
import re
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from promread.config import Settings, get_settings
from promread.exceptions import PromReadError

SENSITIVE_KEYS = ("password", "secret", "token", "authorization")

# user:password@ in ClickHouse URLs
URL_CREDENTIALS_PATTERN = re.compile(r"(?P<scheme>[a-z][a-z0-9+.-]*://)[^/@\s]+@", re.IGNORECASE)

# HTTP client libraries log every ClickHouse round trip at INFO and DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore")

REDACTED = "***REDACTED***"


def censor_sensitive_keys(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact credential fields and credentials embedded in URLs."""
    for key, value in list(event_dict.items()):
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
            event_dict[key] = REDACTED
        elif isinstance(value, str) and "://" in value:
            event_dict[key] = URL_CREDENTIALS_PATTERN.sub(rf"\g<scheme>{REDACTED}@", value)

    return event_dict


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger from settings."""
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        censor_sensitive_keys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
    )

    if settings.log_level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)


def log_error(
    logger: structlog.stdlib.BoundLogger,
    error: Exception,
    operation: str,
    **kwargs: Any,
) -> None:
    """
    Log a failed operation with the error's structured context.

    The request id, when one is bound, is merged in from the structlog
    context variables.
    """
    context: dict[str, Any] = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error_message": error.message if isinstance(error, PromReadError) else str(error),
    }
    if isinstance(error, PromReadError):
        context.update(error.context)
    context.update(kwargs)

    logger.error("operation_failed", **context, exc_info=True)
