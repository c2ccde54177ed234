"""Cooperative cancellation token handed to visitors.

Visitors receive a ``StopToken`` as their ``stop`` argument.  Calling it
requests that the traversal end; the engine checks the flag after every
visitor call, so the element being visited when ``stop()`` is called is
the last one visited.

Example::

    def visit(x, i, arr, stop):
        if x < 0:
            stop()
        return x * 2

    outcome = await async_map(values, visit)
    outcome.success  # False if a negative value was seen
"""

from __future__ import annotations


class StopToken:
    """Callable cancellation flag, owned by one traversal."""

    __slots__ = ("_stopped",)

    def __init__(self) -> None:
        self._stopped = False

    def __call__(self) -> None:
        self._stopped = True

    def stop(self) -> None:
        """Same as calling the token."""
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    def __repr__(self) -> str:
        return f"StopToken(stopped={self._stopped})"


__all__ = ["StopToken"]
