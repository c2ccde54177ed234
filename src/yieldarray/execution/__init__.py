"""Chunked execution -- clock, engine, scheduler and the operation adapters.

Architecture::

    clock.py          Clock protocol + LoopClock (perf_counter, asyncio.sleep(0))
    cancellation.py   StopToken handed to visitors
    visitor.py        Signature-based visitor arity adaptation
    traversal.py      TraversalConfig / TraversalState / TraversalEngine
    scheduler.py      ChunkBudget + ChunkScheduler (adaptive bursts)
    operations.py     async_every ... async_reduce_right
"""

from yieldarray.execution.cancellation import StopToken
from yieldarray.execution.clock import Clock, LoopClock
from yieldarray.execution.operations import (
    async_every,
    async_filter,
    async_find,
    async_find_index,
    async_for_each,
    async_index_of,
    async_last_index_of,
    async_map,
    async_reduce,
    async_reduce_right,
    async_some,
)
from yieldarray.execution.scheduler import (
    BurstStats,
    ChunkBudget,
    ChunkScheduler,
    get_scheduler,
    reset_scheduler,
)
from yieldarray.execution.traversal import (
    Direction,
    Seed,
    TraversalConfig,
    TraversalEngine,
    TraversalKind,
    TraversalState,
)

__all__ = [
    "StopToken",
    "Clock",
    "LoopClock",
    "BurstStats",
    "ChunkBudget",
    "ChunkScheduler",
    "get_scheduler",
    "reset_scheduler",
    "Direction",
    "Seed",
    "TraversalConfig",
    "TraversalEngine",
    "TraversalKind",
    "TraversalState",
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
]
