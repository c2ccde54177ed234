"""yieldarray core -- errors, logging, settings and the Outcome envelope.

Architecture::

    errors.py      Structured error hierarchy (YieldArrayError, VisitorError)
    logging.py     structlog configuration + get_logger
    settings.py    ChunkSettings (pydantic-settings) + get_settings()
    result.py      Outcome[T] envelope
"""

from yieldarray.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidArgumentError,
    InvalidConfigError,
    VisitorError,
    YieldArrayError,
    categorize_error,
)
from yieldarray.core.logging import LogContext, configure_logging, get_logger
from yieldarray.core.result import Outcome
from yieldarray.core.settings import ChunkSettings, clear_settings_cache, get_settings

__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "YieldArrayError",
    "InvalidArgumentError",
    "VisitorError",
    "ConfigError",
    "InvalidConfigError",
    "categorize_error",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # Result
    "Outcome",
    # Settings
    "ChunkSettings",
    "get_settings",
    "clear_settings_cache",
]
