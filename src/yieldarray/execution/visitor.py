"""Visitor adaptation — call caller functions with as many args as they take.

The full visitor call shape is ``(element, index, array, stop)``, or
``(accumulator, element, index, array, stop)`` for folds.  Most visitors
only care about the element (``lambda x: x > 2``), so the engine inspects
the signature once and passes only the leading positional arguments the
function can accept.

Example::

    call = adapt_visitor(lambda x: x * 2, max_args=4)
    call(3, 0, [3], token)  # -> 6
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def positional_arity(fn: Callable[..., Any], default: int) -> int | None:
    """Number of positional parameters ``fn`` accepts.

    Returns ``None`` when ``fn`` takes ``*args`` (no limit), and ``default``
    when the signature cannot be inspected (some C builtins).
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return default

    count = 0
    for param in sig.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in _POSITIONAL:
            count += 1
    return count


def adapt_visitor(
    fn: Callable[..., Any],
    *,
    max_args: int,
    min_args: int = 1,
) -> Callable[..., Any]:
    """Wrap ``fn`` so it can always be called with ``max_args`` arguments.

    Parameters
    ----------
    fn:
        The caller's visitor.
    max_args:
        Length of the full call shape (4 for scans, 5 for folds).
    min_args:
        Arguments to pass when the signature is not inspectable.
    """
    arity = positional_arity(fn, default=min_args)
    if arity is None or arity >= max_args:
        return fn

    @functools.wraps(fn)
    def _call(*args: Any) -> Any:
        return fn(*args[:arity])

    return _call


__all__ = ["adapt_visitor", "positional_arity"]
