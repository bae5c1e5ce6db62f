"""
Parcelspine Logging - structured logging for decoders and their callers.

Decoding runs inside IPC callbacks where a failure is only visible through
logs, so every module logs snake_case events with key-value fields through
structlog rather than formatted strings.

Manifesto:
    - **Structures:** JSON output for log aggregation
    - **Correlates:** bound context (transaction code, interface) propagates
    - **Flexes:** console output for development, JSON for production

Architecture:
    ::

        configure_logging(level="INFO", json_format=None, service="parcelspine")
            ↓
        structlog processor chain:
          1. TimeStamper(iso)
          2. merge_contextvars
          3. add_log_level
          4. service.name (from DecoderSettings.service_name)
          5. ECS field names + JSONRenderer (or ConsoleRenderer on a tty)

Examples:
    >>> from parcelspine.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", service="powerstats-reader")
    >>> logger = get_logger(__name__)
    >>> logger.debug("bundle_decoded", entries=2)

Tags:
    logging, structlog, observability, parcelspine
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from parcelspine.core.settings import DecoderSettings

DEFAULT_SERVICE = "parcelspine"

# Loggers bind their module name under this key; JSON output renames it.
LOGGER_NAME_KEY = "logger_name"

# ECS names for the fields decoders emit in JSON mode
_ECS_FIELDS = {
    "timestamp": "@timestamp",
    "level": "log.level",
    LOGGER_NAME_KEY: "log.logger",
}


def _service_metadata(service: str) -> Processor:
    def add_service(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def _ecs_field_names(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    for field, ecs_field in _ECS_FIELDS.items():
        if field in event_dict:
            event_dict[ecs_field] = event_dict.pop(field)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = DEFAULT_SERVICE,
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for decoder output.

    Loggers created with get_logger before this call pick the new
    configuration up on first use, so module-level loggers need no
    re-creation.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Value of the ``service.name`` field
        add_timestamp: Include ISO timestamp in logs
    """
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _service_metadata(service),
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors += [_ecs_field_names, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_settings(settings: DecoderSettings) -> None:
    """Configure logging from a DecoderSettings instance."""
    configure_logging(
        level=settings.log_level,
        json_format=settings.json_logs,
        service=settings.service_name,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    The logger is a lazy proxy: nothing is resolved until the first log call.

    Args:
        name: Logger name (usually __name__), bound as ``logger_name``
    """
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name, logger_name=name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(interface="IResultReceiver", code=0):
            bundle = read_bundle(cursor, registry)
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> "LogContext":
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
