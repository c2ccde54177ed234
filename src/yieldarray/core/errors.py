"""
Structured error types for yieldarray.

Every failure raised by the traversal machinery is a ``YieldArrayError``
carrying a category, structured context (which operation, which index,
which burst) and, when it wraps a caller exception, the original cause.

Manifesto:
    - **Three outcomes, never conflated:** completion, cooperative stop and
      failure must be distinguishable by the caller. Completion and stop are
      both an ``Outcome``; only failure raises.
    - **Typed hierarchy:** argument problems and visitor crashes are
      different classes, not different messages.
    - **Error chaining:** the visitor's own exception is preserved as
      ``cause`` and ``__cause__``.

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     YieldArrayError                          │
        │              (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  InvalidArgumentError    VisitorError      ConfigError       │
        │  (VALIDATION)            (VISITOR)         (CONFIG)          │
        │                                                 │            │
        │                                          InvalidConfigError  │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> err = InvalidArgumentError("more must be callable", field="more", value=3)
    >>> err.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> err.to_dict()["field"]
    'more'

    >>> try:
    ...     raise KeyError("x")
    ... except KeyError as e:
    ...     err = VisitorError("visitor failed", cause=e).with_context(index=4)
    >>> err.context.index
    4

Guardrails:
    ❌ DON'T: Wrap a stop() request in an exception
    ✅ DO: Report it as ``Outcome(success=False)``

    ❌ DON'T: Swallow the visitor's exception
    ✅ DO: Pass it as ``cause=`` so the traceback chain survives

Tags:
    error-handling, exception-hierarchy, error-context, yieldarray

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        VALIDATION: Bad arguments handed to an operation
        VISITOR: The caller's visitor raised during a burst
        CONFIG: Invalid chunking configuration
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    VALIDATION = "VALIDATION"
    VISITOR = "VISITOR"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: Name of the traversal operation (e.g. ``"map"``)
        index: Array index being visited when the error happened
        burst: One-based burst number
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    index: int | None = None
    burst: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "index", "burst"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class YieldArrayError(Exception):
    """
    Base exception for all yieldarray errors.

    Subclasses set ``default_category`` so callers rarely pass one
    explicitly.

    Examples:
        >>> error = YieldArrayError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(operation="reduce").context.operation
        'reduce'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> YieldArrayError:
        """
        Add context to this error (fluent API).

        Usage:
            raise VisitorError("boom", cause=e).with_context(
                operation="map",
                index=12,
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class InvalidArgumentError(YieldArrayError, TypeError):
    """
    An operation was called with arguments it cannot work with.

    Raised before any visitor call: non-sequence input, non-callable
    visitor, non-integer ``from_index``, or a fold without a seed over an
    empty sequence. Also a ``TypeError`` so generic handlers still catch it.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        if self.constraint:
            result["constraint"] = self.constraint
        return result


# =============================================================================
# VISITOR ERRORS
# =============================================================================


class VisitorError(YieldArrayError):
    """
    The caller's visitor raised while a burst was running.

    The traversal is abandoned: no further bursts run and no partial
    result is produced. The original exception is ``cause``.
    """

    default_category = ErrorCategory.VISITOR

    @property
    def index(self) -> int | None:
        """Index of the element whose visit raised."""
        return self.context.index

    @property
    def operation(self) -> str | None:
        return self.context.operation


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(YieldArrayError):
    """Chunking configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, YieldArrayError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "YieldArrayError",
    "InvalidArgumentError",
    "VisitorError",
    "ConfigError",
    "InvalidConfigError",
    "categorize_error",
]
