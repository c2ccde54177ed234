"""
Outcome envelope for traversal results.

Every operation resolves to exactly one ``Outcome``: the projected result
plus a ``success`` flag. ``success`` is ``False`` only when the visitor
asked to stop before the traversal finished on its own; exhausting the
array and short-circuit matches (``find``, ``some``...) are both successes.
Failures are never an ``Outcome``; they raise.

Architecture:
    ::

        ┌──────────────────────────────────────────────┐
        │                 Outcome[T]                    │
        ├──────────────────────────────────────────────┤
        │  result: T          projected final value     │
        │  success: bool      False iff stop() called   │
        ├──────────────────────────────────────────────┤
        │  stopped            not success               │
        │  to_dict()          {"result", "success"}     │
        └──────────────────────────────────────────────┘

Examples:
    >>> outcome = Outcome(result=3, success=True)
    >>> match outcome:
    ...     case Outcome(result=value, success=True):
    ...         print(value)
    3
    >>> Outcome([], False).stopped
    True

Tags:
    result-pattern, outcome, yieldarray

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Terminal value of one traversal.

    Attributes:
        result: The operation's projected result (list for map/filter,
            index for the index searches, accumulator for folds...)
        success: ``False`` iff the visitor called ``stop()`` first
    """

    result: T
    success: bool = True

    @property
    def stopped(self) -> bool:
        """True when the traversal ended because the visitor called stop()."""
        return not self.success

    def to_dict(self) -> dict[str, Any]:
        return {"result": self.result, "success": self.success}


__all__ = ["Outcome"]
