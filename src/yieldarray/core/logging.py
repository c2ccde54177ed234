"""
yieldarray logging - structured logging via structlog.

Manifesto:
    The traversal engine runs inside somebody else's event loop, so its logs
    must be cheap, structured and quiet by default:

    - **Structures:** key/value events (``traversal.burst chunk_length=64``)
    - **Flexes:** JSON output for aggregation, colored console for development
    - **Quiet:** per-burst events are DEBUG; nothing is logged per element;
      events go to stdlib logging, silent until the host configures it

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │ configure_logging(level="INFO", json_format=None,          │
        │                   service="yieldarray")                    │
        │     ↓                                                       │
        │ structlog processor chain:                                  │
        │   1. filter_by_level                                        │
        │   2. TimeStamper (iso)                                      │
        │   3. merge_contextvars                                      │
        │   4. add_log_level / add_logger_name                        │
        │   5. add_service_metadata                                   │
        │   6. elasticsearch_compatible (JSON only)                   │
        │   7. JSONRenderer | ConsoleRenderer                         │
        │     ↓                                                       │
        │ stdlib logging → stderr                                     │
        └────────────────────────────────────────────────────────────┘

Examples:
    >>> from yieldarray.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.debug("traversal.burst", operation="map", processed=64)

Tags:
    logging, structlog, observability, yieldarray

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "yieldarray"

# Library loggers stay silent until the application installs handlers.
logging.getLogger("yieldarray").addHandler(logging.NullHandler())


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "yieldarray",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    structlog renders the event; stdlib logging (stderr) delivers it, so
    the ``yieldarray`` logger level and any handlers the host application
    already installed are respected.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    log_level = getattr(logging, level.upper())
    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service_metadata,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if json_format:
        processors.append(_elasticsearch_compatible)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    logging.getLogger("yieldarray").setLevel(log_level)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger backed by the stdlib logger ``name``.

    Events always end up in stdlib logging, so an application that never
    calls :func:`configure_logging` sees nothing on stdout and filters
    ``yieldarray`` events with its own logging setup.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Context manager for scoped logging context.

    Example:
        async with LogContext(traversal_id="abc123"):
            await async_map(rows, normalize)
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())

    async def __aenter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    async def __aexit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "LogContext",
]
