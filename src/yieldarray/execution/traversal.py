"""Traversal Engine — generic forward/backward index walk.

WHY
───
``every``, ``filter``, ``find``, ``map``, ``reduce`` and the rest differ
only in where they start, which way they walk, what they do with each
visitor return value, when they may stop early, and what they hand back at
the end.  The engine implements the walk once; each operation is a
``TraversalConfig`` tagged with one of four ``TraversalKind`` variants.

ARCHITECTURE
────────────
::

    TraversalConfig (frozen, one per invocation)
      operation, kind, direction, start_index, seed,
      step(state, element, index, array, stop) -> value
      early_exit(value) -> bool        (optional)
      project(state) -> result

    TraversalState (mutable cursor, owned by one scheduler run)
      index, accumulator, visited, done, cancelled,
      matched, match_index, match_element

    TraversalEngine.advance(config, state, array, limit, stop) -> processed
      for up to `limit` elements:
          index out of range?  -> done
          value = step(...)
          early_exit(value)?   -> matched, done
          stop.stopped?        -> cancelled

The engine never caches ``len(array)`` or any element: both are re-read
for every visit, and an index that falls outside the array (because the
walk ran off the end or the visitor shrank the array) ends the traversal
as exhausted.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from yieldarray.execution.cancellation import StopToken

R = TypeVar("R")


class Direction(str, Enum):
    """Walk order over indices."""

    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def delta(self) -> int:
        return 1 if self is Direction.FORWARD else -1


class TraversalKind(str, Enum):
    """Closed set of traversal variants.

    SCAN       forEach: visitor return value discarded
    TRANSFORM  map, filter: results collected into a new list
    FOLD       reduce, reduceRight: accumulator replaced each step
    SEARCH     every, some, find, findIndex, indexOf, lastIndexOf
    """

    SCAN = "scan"
    TRANSFORM = "transform"
    FOLD = "fold"
    SEARCH = "search"


@dataclass(frozen=True, slots=True)
class Seed(Generic[R]):
    """Optional accumulator seed with an explicit presence flag.

    ``Seed.of(0)`` and ``Seed.of(None)`` are present seeds; only
    ``Seed.absent()`` is missing.
    """

    value: R | None = None
    present: bool = False

    @classmethod
    def of(cls, value: R) -> Seed[R]:
        return cls(value=value, present=True)

    @classmethod
    def absent(cls) -> Seed[Any]:
        return cls()


StepFn = Callable[["TraversalState", Any, int, Sequence[Any], StopToken], Any]


@dataclass(frozen=True)
class TraversalConfig:
    """Immutable description of one traversal.

    Attributes:
        operation: Operation name used in logs and errors (``"map"``)
        kind: Which variant this traversal is
        direction: Walk order
        start_index: First index to visit, already normalized
        seed: Initial accumulator
        step: Called once per visited element; updates ``state.accumulator``
            as the operation requires and returns the visitor's value
        project: Turns the final state into the Outcome's result
        early_exit: Predicate over ``step``'s return value; when it holds
            the traversal completes at that element
        accumulator_factory: Builds a fresh accumulator per run (``list``
            for map/filter); takes precedence over ``seed``
    """

    operation: str
    kind: TraversalKind
    direction: Direction
    start_index: int
    seed: Seed[Any]
    step: StepFn
    project: Callable[[TraversalState], Any]
    early_exit: Callable[[Any], bool] | None = None
    accumulator_factory: Callable[[], Any] | None = None


@dataclass
class TraversalState:
    """Mutable cursor for one in-flight traversal."""

    index: int
    accumulator: Any = None
    visited: int = 0
    done: bool = False
    cancelled: bool = False
    matched: bool = False
    match_index: int = -1
    match_element: Any = None

    @classmethod
    def start(cls, config: TraversalConfig) -> TraversalState:
        if config.accumulator_factory is not None:
            return cls(index=config.start_index, accumulator=config.accumulator_factory())
        return cls(index=config.start_index, accumulator=config.seed.value)

    @property
    def finished(self) -> bool:
        return self.done or self.cancelled


class TraversalEngine:
    """Visits elements for the chunk scheduler, one burst at a time.

    Stateless: everything that survives between bursts lives in
    ``TraversalState``.
    """

    def advance(
        self,
        config: TraversalConfig,
        state: TraversalState,
        array: Sequence[Any],
        limit: int,
        stop: StopToken,
    ) -> int:
        """Visit up to ``limit`` elements; return how many were visited.

        Exceptions raised by ``config.step`` propagate unchanged; the state
        then still points at the failing index.
        """
        delta = config.direction.delta
        step = config.step
        early_exit = config.early_exit
        processed = 0

        while processed < limit and not state.finished:
            index = state.index
            if index < 0 or index >= len(array):
                state.done = True
                break

            element = array[index]
            value = step(state, element, index, array, stop)
            processed += 1
            state.visited += 1
            state.index = index + delta

            if early_exit is not None and early_exit(value):
                state.matched = True
                state.match_index = index
                state.match_element = element
                state.done = True
            if stop.stopped:
                state.cancelled = True
            elif not 0 <= state.index < len(array):
                state.done = True

        return processed


__all__ = [
    "Direction",
    "TraversalKind",
    "Seed",
    "TraversalConfig",
    "TraversalState",
    "TraversalEngine",
]
