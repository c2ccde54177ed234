"""Chunk Scheduler — adaptive bursts with a yield between each.

WHY
───
Running a visitor over a large array in one go blocks the event loop for
as long as the whole traversal takes.  Fixed-size chunks either stutter
the loop (too big) or drown in scheduling overhead (too small), and the
right size depends on how expensive the visitor is, which is unknown up
front.  The scheduler learns it: each burst is timed, and the next burst
is sized so it should take about ``budget_ms``.

ARCHITECTURE
────────────
::

    ChunkScheduler.run(config, array)
      ├── ChunkBudget.from_settings()      ─ initial_chunk_length, budget
      └── loop
            ├── clock.yield_turn()         ─ host turn (also before burst 1)
            ├── engine.advance(limit=chunk_length)
            ├── budget.update(processed, elapsed)
            │     chunk_length = clamp(budget / seconds_per_element)
            ├── on_burst(BurstStats)       ─ optional observer
            └── finished?  → Outcome(project(state), success=not cancelled)

    Visitor raises → traversal abandoned → VisitorError(cause=exc)

BEST PRACTICES
──────────────
- Keep visitors synchronous; anything they ``await`` is outside the burst
  budget.
- Lower ``YIELDARRAY_BUDGET_MS`` when the loop also drives rendering.

Related modules:
    traversal.py   — the per-element walk this module drives
    operations.py  — the eleven configurations handed to ``run``
    clock.py       — time source and yield primitive

Example::

    scheduler = ChunkScheduler(settings=ChunkSettings(budget_ms=4))
    outcome = await scheduler.run(config, rows)
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from yieldarray.core.errors import InvalidConfigError, VisitorError
from yieldarray.core.logging import get_logger
from yieldarray.core.result import Outcome
from yieldarray.core.settings import ChunkSettings, get_settings
from yieldarray.execution.cancellation import StopToken
from yieldarray.execution.clock import Clock, LoopClock
from yieldarray.execution.traversal import TraversalConfig, TraversalEngine, TraversalState

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class BurstStats:
    """Measurements for one completed burst."""

    burst: int
    chunk_length: int
    processed: int
    elapsed_seconds: float
    next_chunk_length: int

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_seconds * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "burst": self.burst,
            "chunk_length": self.chunk_length,
            "processed": self.processed,
            "elapsed_ms": round(self.elapsed_ms, 3),
            "next_chunk_length": self.next_chunk_length,
        }


@dataclass
class ChunkBudget:
    """Adaptive burst size for one traversal.

    Attributes:
        target_seconds: Wall-clock time each burst should take
        chunk_length: Elements the next burst may process
        max_length: Upper clamp on ``chunk_length``
        seconds_per_element: Last measured cost, ``None`` until measured
    """

    target_seconds: float
    chunk_length: int
    max_length: int
    seconds_per_element: float | None = None

    def __post_init__(self) -> None:
        if self.target_seconds <= 0:
            raise InvalidConfigError("target_seconds", self.target_seconds)
        if self.max_length < 1:
            raise InvalidConfigError("max_length", self.max_length)
        if not 1 <= self.chunk_length <= self.max_length:
            raise InvalidConfigError("chunk_length", self.chunk_length)

    @classmethod
    def from_settings(cls, settings: ChunkSettings) -> ChunkBudget:
        return cls(
            target_seconds=settings.budget_seconds,
            chunk_length=settings.initial_chunk_length,
            max_length=settings.max_chunk_length,
        )

    def update(self, processed: int, elapsed: float) -> int:
        """Resize the next burst from the last one's measurements.

        A burst that visited nothing carries no information and leaves the
        length unchanged. A burst too fast for the clock to measure doubles
        it.
        """
        if processed <= 0:
            return self.chunk_length

        if elapsed <= 0:
            proposed = self.chunk_length * 2
        else:
            self.seconds_per_element = elapsed / processed
            proposed = int(self.target_seconds / self.seconds_per_element)

        self.chunk_length = max(1, min(proposed, self.max_length))
        return self.chunk_length


class ChunkScheduler:
    """Drives one traversal at a time to completion in adaptive bursts.

    A scheduler holds no per-traversal state, so one instance can serve any
    number of concurrent traversals on the same loop; each ``run`` owns its
    own budget, state and stop token.

    Parameters
    ----------
    settings : ChunkSettings | None
        Chunk budget configuration (default: :func:`get_settings`).
    clock : Clock | None
        Time source and yield primitive (default: :class:`LoopClock`).
    on_burst : callable | None
        Called with ``(config, BurstStats)`` after every burst.
    """

    def __init__(
        self,
        settings: ChunkSettings | None = None,
        clock: Clock | None = None,
        on_burst: Callable[[TraversalConfig, BurstStats], None] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock or LoopClock()
        self._on_burst = on_burst
        self._engine = TraversalEngine()

    @property
    def settings(self) -> ChunkSettings:
        return self._settings

    async def run(self, config: TraversalConfig, array: Sequence[Any]) -> Outcome[Any]:
        """Traverse ``array`` as ``config`` describes and return the Outcome.

        Raises:
            VisitorError: The visitor raised; no further bursts were run.
        """
        budget = ChunkBudget.from_settings(self._settings)
        state = TraversalState.start(config)
        stop = StopToken()
        burst = 0

        logger.debug(
            "traversal.start",
            operation=config.operation,
            kind=config.kind.value,
            direction=config.direction.value,
            start_index=config.start_index,
            chunk_length=budget.chunk_length,
        )

        while True:
            await self._clock.yield_turn()
            burst += 1
            chunk_length = budget.chunk_length

            started = self._clock.now()
            try:
                processed = self._engine.advance(config, state, array, chunk_length, stop)
            except Exception as e:
                logger.warning(
                    "traversal.failed",
                    operation=config.operation,
                    index=state.index,
                    burst=burst,
                    error=f"{type(e).__name__}: {e}",
                )
                raise VisitorError(
                    f"Visitor raised during {config.operation} at index {state.index}: "
                    f"{type(e).__name__}: {e}",
                    cause=e,
                ).with_context(operation=config.operation, index=state.index, burst=burst) from e
            elapsed = self._clock.now() - started

            if processed == 0:
                state.done = True
            next_length = budget.update(processed, elapsed)

            stats = BurstStats(
                burst=burst,
                chunk_length=chunk_length,
                processed=processed,
                elapsed_seconds=elapsed,
                next_chunk_length=next_length,
            )
            logger.debug("traversal.burst", operation=config.operation, **stats.to_dict())
            if self._on_burst is not None:
                self._on_burst(config, stats)

            if state.finished:
                break

        outcome = Outcome(result=config.project(state), success=not state.cancelled)

        if state.cancelled:
            logger.info(
                "traversal.stopped",
                operation=config.operation,
                visited=state.visited,
                bursts=burst,
            )
        else:
            logger.debug(
                "traversal.complete",
                operation=config.operation,
                visited=state.visited,
                bursts=burst,
                matched=state.matched,
            )
        return outcome

    def submit(self, config: TraversalConfig, array: Sequence[Any]) -> asyncio.Task[Outcome[Any]]:
        """Schedule :meth:`run` on the running loop and return its task.

        The task completes exactly once, with the Outcome or the
        ``VisitorError``.
        """
        return asyncio.create_task(self.run(config, array), name=f"yieldarray.{config.operation}")


# ── Default scheduler ────────────────────────────────────────────────────

_default_scheduler: ChunkScheduler | None = None


def get_scheduler() -> ChunkScheduler:
    """Scheduler used by the operations when none is passed explicitly."""
    global _default_scheduler
    if _default_scheduler is None:
        _default_scheduler = ChunkScheduler(settings=get_settings())
    return _default_scheduler


def reset_scheduler() -> None:
    """Forget the default scheduler so the next call rebuilds it from settings."""
    global _default_scheduler
    _default_scheduler = None


__all__ = ["BurstStats", "ChunkBudget", "ChunkScheduler", "get_scheduler", "reset_scheduler"]
