"""Operation adapters — the eleven array traversals as engine configs.

Each public coroutine validates its arguments, builds a
:class:`~yieldarray.execution.traversal.TraversalConfig` and hands it to a
:class:`~yieldarray.execution.scheduler.ChunkScheduler`.  The ``*_config``
builders are exposed separately so a config can be submitted to a custom
scheduler or inspected in tests.

ARCHITECTURE
────────────
::

    operation            kind        direction  early exit        result
    ───────────────────  ──────────  ─────────  ────────────────  ──────────────
    async_every          SEARCH      forward    falsy             bool
    async_some           SEARCH      forward    truthy            bool
    async_find           SEARCH      forward    truthy            element | None
    async_find_index     SEARCH      forward    truthy            index | -1
    async_index_of       SEARCH      forward    == value          index | -1
    async_last_index_of  SEARCH      backward   == value          index | -1
    async_filter         TRANSFORM   forward    -                 new list
    async_map            TRANSFORM   forward    -                 new list
    async_for_each       SCAN        forward    -                 arr
    async_reduce         FOLD        forward    -                 accumulator
    async_reduce_right   FOLD        backward   -                 accumulator

Visitors are called as ``more(element, index, array, stop)`` (folds:
``more(accumulator, element, index, array, stop)``), trimmed to the
number of positional parameters they accept.

Example::

    outcome = await async_find([1, 2, 3, 4], lambda x: x > 2)
    outcome.result, outcome.success  # (3, True)

    def visit(x, i, arr, stop):
        if i == 10:
            stop()
    outcome = await async_for_each(rows, visit)
    outcome.success  # False
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from yieldarray.core.errors import InvalidArgumentError
from yieldarray.core.result import Outcome
from yieldarray.execution.cancellation import StopToken
from yieldarray.execution.scheduler import ChunkScheduler, get_scheduler
from yieldarray.execution.traversal import (
    Direction,
    Seed,
    TraversalConfig,
    TraversalKind,
    TraversalState,
)
from yieldarray.execution.visitor import adapt_visitor

# Marks an omitted ``init``; converted to Seed.absent() immediately.
_MISSING: Any = object()

_NON_ARRAYS = (str, bytes, bytearray)


# =============================================================================
# Validation
# =============================================================================


def _check_array(arr: Any, operation: str) -> None:
    if not isinstance(arr, Sequence) or isinstance(arr, _NON_ARRAYS):
        raise InvalidArgumentError(
            f"{operation}: expected a sequence, got {type(arr).__name__}",
            field="arr",
            value=type(arr).__name__,
            constraint="Sequence (not str/bytes)",
        ).with_context(operation=operation)


def _check_visitor(more: Any, operation: str) -> None:
    if not callable(more):
        raise InvalidArgumentError(
            f"{operation}: visitor must be callable, got {type(more).__name__}",
            field="more",
            value=more,
            constraint="callable",
        ).with_context(operation=operation)


def _check_from_index(from_index: Any, operation: str) -> None:
    if isinstance(from_index, bool) or not isinstance(from_index, int):
        raise InvalidArgumentError(
            f"{operation}: from_index must be an int, got {type(from_index).__name__}",
            field="from_index",
            value=from_index,
            constraint="int",
        ).with_context(operation=operation)


def _forward_start(length: int, from_index: int) -> int:
    """Negative values count from the end; past-the-end means nothing to visit."""
    if from_index < 0:
        return max(length + from_index, 0)
    return from_index


def _backward_start(length: int, from_index: int | None) -> int:
    """Default is the last index; a negative result means nothing to visit."""
    if from_index is None:
        return length - 1
    if from_index < 0:
        return length + from_index
    return min(from_index, length - 1)


# =============================================================================
# Step / projection helpers
# =============================================================================


def _plain_step(more: Callable[..., Any]) -> Callable[..., Any]:
    visit = adapt_visitor(more, max_args=4)

    def step(state: TraversalState, x: Any, i: int, arr: Sequence[Any], stop: StopToken) -> Any:
        return visit(x, i, arr, stop)

    return step


def _equals(value: Any) -> Callable[..., Any]:
    def step(state: TraversalState, x: Any, i: int, arr: Sequence[Any], stop: StopToken) -> bool:
        return x is value or x == value

    return step


def _falsy(value: Any) -> bool:
    return not value


def _match_index(state: TraversalState) -> int:
    return state.match_index


def _accumulator(state: TraversalState) -> Any:
    return state.accumulator


# =============================================================================
# Config builders
# =============================================================================


def every_config(arr: Sequence[Any], more: Callable[..., Any]) -> TraversalConfig:
    """True unless some visitor call returns a falsy value."""
    _check_array(arr, "every")
    _check_visitor(more, "every")
    return TraversalConfig(
        operation="every",
        kind=TraversalKind.SEARCH,
        direction=Direction.FORWARD,
        start_index=0,
        seed=Seed.absent(),
        step=_plain_step(more),
        early_exit=_falsy,
        project=lambda state: not state.matched,
    )


def some_config(arr: Sequence[Any], more: Callable[..., Any]) -> TraversalConfig:
    """True as soon as a visitor call returns a truthy value."""
    _check_array(arr, "some")
    _check_visitor(more, "some")
    return TraversalConfig(
        operation="some",
        kind=TraversalKind.SEARCH,
        direction=Direction.FORWARD,
        start_index=0,
        seed=Seed.absent(),
        step=_plain_step(more),
        early_exit=bool,
        project=lambda state: state.matched,
    )


def filter_config(arr: Sequence[Any], more: Callable[..., Any]) -> TraversalConfig:
    _check_array(arr, "filter")
    _check_visitor(more, "filter")
    visit = adapt_visitor(more, max_args=4)

    def step(state: TraversalState, x: Any, i: int, a: Sequence[Any], stop: StopToken) -> Any:
        keep = visit(x, i, a, stop)
        if keep:
            state.accumulator.append(x)
        return keep

    return TraversalConfig(
        operation="filter",
        kind=TraversalKind.TRANSFORM,
        direction=Direction.FORWARD,
        start_index=0,
        seed=Seed.absent(),
        step=step,
        project=_accumulator,
        accumulator_factory=list,
    )


def map_config(arr: Sequence[Any], more: Callable[..., Any]) -> TraversalConfig:
    _check_array(arr, "map")
    _check_visitor(more, "map")
    visit = adapt_visitor(more, max_args=4)

    def step(state: TraversalState, x: Any, i: int, a: Sequence[Any], stop: StopToken) -> Any:
        value = visit(x, i, a, stop)
        state.accumulator.append(value)
        return value

    return TraversalConfig(
        operation="map",
        kind=TraversalKind.TRANSFORM,
        direction=Direction.FORWARD,
        start_index=0,
        seed=Seed.absent(),
        step=step,
        project=_accumulator,
        accumulator_factory=list,
    )


def find_config(arr: Sequence[Any], more: Callable[..., Any], from_index: int = 0) -> TraversalConfig:
    """First element whose visitor call is truthy, else ``None``."""
    _check_array(arr, "find")
    _check_visitor(more, "find")
    _check_from_index(from_index, "find")
    return TraversalConfig(
        operation="find",
        kind=TraversalKind.SEARCH,
        direction=Direction.FORWARD,
        start_index=_forward_start(len(arr), from_index),
        seed=Seed.absent(),
        step=_plain_step(more),
        early_exit=bool,
        project=lambda state: state.match_element if state.matched else None,
    )


def find_index_config(
    arr: Sequence[Any], more: Callable[..., Any], from_index: int = 0
) -> TraversalConfig:
    """Index of the first element whose visitor call is truthy, else -1."""
    _check_array(arr, "find_index")
    _check_visitor(more, "find_index")
    _check_from_index(from_index, "find_index")
    return TraversalConfig(
        operation="find_index",
        kind=TraversalKind.SEARCH,
        direction=Direction.FORWARD,
        start_index=_forward_start(len(arr), from_index),
        seed=Seed.absent(),
        step=_plain_step(more),
        early_exit=bool,
        project=_match_index,
    )


def for_each_config(arr: Sequence[Any], more: Callable[..., Any]) -> TraversalConfig:
    _check_array(arr, "for_each")
    _check_visitor(more, "for_each")
    visit = adapt_visitor(more, max_args=4)

    def step(state: TraversalState, x: Any, i: int, a: Sequence[Any], stop: StopToken) -> None:
        visit(x, i, a, stop)

    return TraversalConfig(
        operation="for_each",
        kind=TraversalKind.SCAN,
        direction=Direction.FORWARD,
        start_index=0,
        seed=Seed.of(arr),
        step=step,
        project=_accumulator,
    )


def index_of_config(arr: Sequence[Any], value: Any, from_index: int = 0) -> TraversalConfig:
    _check_array(arr, "index_of")
    _check_from_index(from_index, "index_of")
    return TraversalConfig(
        operation="index_of",
        kind=TraversalKind.SEARCH,
        direction=Direction.FORWARD,
        start_index=_forward_start(len(arr), from_index),
        seed=Seed.absent(),
        step=_equals(value),
        early_exit=bool,
        project=_match_index,
    )


def last_index_of_config(
    arr: Sequence[Any], value: Any, from_index: int | None = None
) -> TraversalConfig:
    _check_array(arr, "last_index_of")
    if from_index is not None:
        _check_from_index(from_index, "last_index_of")
    return TraversalConfig(
        operation="last_index_of",
        kind=TraversalKind.SEARCH,
        direction=Direction.BACKWARD,
        start_index=_backward_start(len(arr), from_index),
        seed=Seed.absent(),
        step=_equals(value),
        early_exit=bool,
        project=_match_index,
    )


def _fold_config(
    operation: str,
    direction: Direction,
    arr: Sequence[Any],
    more: Callable[..., Any],
    seed: Seed[Any],
) -> TraversalConfig:
    _check_array(arr, operation)
    _check_visitor(more, operation)
    length = len(arr)
    first = 0 if direction is Direction.FORWARD else length - 1

    if seed.present:
        start = first
    elif length == 0:
        raise InvalidArgumentError(
            f"{operation} of empty sequence with no initial value",
            field="init",
            constraint="required when the sequence is empty",
        ).with_context(operation=operation)
    else:
        # The first element in walk order seeds the accumulator and is not visited.
        seed = Seed.of(arr[first])
        start = first + direction.delta

    visit = adapt_visitor(more, max_args=5, min_args=2)

    def step(state: TraversalState, x: Any, i: int, a: Sequence[Any], stop: StopToken) -> Any:
        state.accumulator = visit(state.accumulator, x, i, a, stop)
        return state.accumulator

    return TraversalConfig(
        operation=operation,
        kind=TraversalKind.FOLD,
        direction=direction,
        start_index=start,
        seed=seed,
        step=step,
        project=_accumulator,
    )


def reduce_config(arr: Sequence[Any], more: Callable[..., Any], init: Any = _MISSING) -> TraversalConfig:
    seed = Seed.absent() if init is _MISSING else Seed.of(init)
    return _fold_config("reduce", Direction.FORWARD, arr, more, seed)


def reduce_right_config(
    arr: Sequence[Any], more: Callable[..., Any], init: Any = _MISSING
) -> TraversalConfig:
    seed = Seed.absent() if init is _MISSING else Seed.of(init)
    return _fold_config("reduce_right", Direction.BACKWARD, arr, more, seed)


# =============================================================================
# Public coroutines
# =============================================================================


async def _run(
    config: TraversalConfig,
    arr: Sequence[Any],
    scheduler: ChunkScheduler | None,
) -> Outcome[Any]:
    return await (scheduler or get_scheduler()).run(config, arr)


async def async_every(
    arr: Sequence[Any],
    more: Callable[..., Any],
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[bool]:
    """Whether every element satisfies ``more``.

    Stops at the first falsy return. Resolves ``Outcome(True)`` for an
    empty sequence.
    """
    return await _run(every_config(arr, more), arr, scheduler)


async def async_some(
    arr: Sequence[Any],
    more: Callable[..., Any],
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[bool]:
    """Whether any element satisfies ``more``. Stops at the first truthy return."""
    return await _run(some_config(arr, more), arr, scheduler)


async def async_filter(
    arr: Sequence[Any],
    more: Callable[..., Any],
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[list[Any]]:
    """New list of the elements for which ``more`` returned a truthy value."""
    return await _run(filter_config(arr, more), arr, scheduler)


async def async_find(
    arr: Sequence[Any],
    more: Callable[..., Any],
    from_index: int = 0,
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[Any]:
    """First element where ``more`` is truthy, searching from ``from_index``; else ``None``."""
    return await _run(find_config(arr, more, from_index), arr, scheduler)


async def async_find_index(
    arr: Sequence[Any],
    more: Callable[..., Any],
    from_index: int = 0,
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[int]:
    """Index of the first element where ``more`` is truthy; else -1."""
    return await _run(find_index_config(arr, more, from_index), arr, scheduler)


async def async_for_each(
    arr: Sequence[Any],
    more: Callable[..., Any],
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[Sequence[Any]]:
    """Call ``more`` for each element. The result is ``arr`` itself."""
    return await _run(for_each_config(arr, more), arr, scheduler)


async def async_index_of(
    arr: Sequence[Any],
    value: Any,
    from_index: int = 0,
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[int]:
    """Index of the first element equal to ``value``, else -1.

    Equality is ``is`` or ``==``, as for ``list.index``.
    """
    return await _run(index_of_config(arr, value, from_index), arr, scheduler)


async def async_last_index_of(
    arr: Sequence[Any],
    value: Any,
    from_index: int | None = None,
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[int]:
    """Index of the last element equal to ``value``, searching backwards
    from ``from_index`` (default: the last index); else -1."""
    return await _run(last_index_of_config(arr, value, from_index), arr, scheduler)


async def async_map(
    arr: Sequence[Any],
    more: Callable[..., Any],
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[list[Any]]:
    """New list of ``more``'s return values, one per visited element.

    Visitors receive as many of ``(element, index, array, stop)`` as they
    accept positionally, so a builtin with optional positional parameters
    gets the index too: ``async_map(xs, round)`` calls ``round(x, index)``.
    Wrap such callables (``lambda x: round(x)``) to pass the element only.
    """
    return await _run(map_config(arr, more), arr, scheduler)


async def async_reduce(
    arr: Sequence[Any],
    more: Callable[..., Any],
    init: Any = _MISSING,
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[Any]:
    """Fold left to right.

    ``init`` seeds the accumulator whenever it is passed, even as ``None``
    or ``0``. Without it the first element is the seed, and an empty
    sequence raises :class:`InvalidArgumentError`.
    """
    return await _run(reduce_config(arr, more, init), arr, scheduler)


async def async_reduce_right(
    arr: Sequence[Any],
    more: Callable[..., Any],
    init: Any = _MISSING,
    *,
    scheduler: ChunkScheduler | None = None,
) -> Outcome[Any]:
    """Fold right to left; seed rules as :func:`async_reduce`."""
    return await _run(reduce_right_config(arr, more, init), arr, scheduler)


__all__ = [
    "async_every",
    "async_filter",
    "async_find",
    "async_find_index",
    "async_for_each",
    "async_index_of",
    "async_last_index_of",
    "async_map",
    "async_reduce",
    "async_reduce_right",
    "async_some",
    "every_config",
    "filter_config",
    "find_config",
    "find_index_config",
    "for_each_config",
    "index_of_config",
    "last_index_of_config",
    "map_config",
    "reduce_config",
    "reduce_right_config",
    "some_config",
]
