"""Structured logging configuration.

Features:
- JSON and text format support
- Service context injection
- Store call timing helpers
"""

import logging
import sys
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, Processor

from redis_transporter.config import LogFormat, LogLevel, get_settings


def add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add service context to log events."""
    event_dict["service"] = get_settings().app_name
    return event_dict


def add_timestamp(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add ISO 8601 timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def setup_logging(
    log_level: LogLevel | None = None,
    log_format: LogFormat | None = None,
) -> None:
    """Configure structured logging for the host process.

    The transporter never calls this itself; hosts that do not configure
    structlog on their own can call it once at startup.

    Args:
        log_level: Override log level (defaults to settings.log_level)
        log_format: Override log format (defaults to settings.log_format)
    """
    settings = get_settings()

    level = LogLevel(log_level or settings.log_level)
    fmt = LogFormat(log_format or settings.log_format)

    logging.basicConfig(
        level=getattr(logging, level.value),
        stream=sys.stdout,
        format="%(message)s",
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        add_service_context,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == LogFormat.JSON:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (defaults to module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def log_store_call_end(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    success: bool,
    duration_ms: float,
    error: str | None = None,
    **extra: object,
) -> None:
    """Log completion of a Redis call."""
    log_data: dict[str, object] = {
        "store_operation": operation,
        "success": success,
        "duration_ms": round(duration_ms, 2),
        **extra,
    }
    if error:
        log_data["error"] = error

    if success:
        logger.debug("Store call completed", **log_data)
    else:
        logger.warning("Store call failed", **log_data)
