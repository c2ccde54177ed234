"""Clock and yield primitive for the chunk scheduler.

WHY
───
The scheduler needs exactly two things from its host: a way to measure
elapsed time, and a way to hand control back so the host can run other
work before the traversal continues.  Putting both behind one small
protocol keeps the scheduler free of direct ``asyncio`` and ``time``
calls, and lets tests drive it with a deterministic clock.

ARCHITECTURE
────────────
::

    Clock (Protocol)
      ├── .now()          ─ monotonic seconds (float)
      └── .yield_turn()   ─ awaitable; resumes on a later loop iteration

    LoopClock
      now()        → time.perf_counter()
      yield_turn() → await asyncio.sleep(0)

Example::

    clock = LoopClock()
    start = clock.now()
    await clock.yield_turn()
    elapsed = clock.now() - start
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Time source plus host-turn yield."""

    def now(self) -> float:
        """Monotonic time in seconds."""
        ...

    async def yield_turn(self) -> None:
        """Return control to the event loop for one turn."""
        ...


class LoopClock:
    """``perf_counter`` timing with an ``asyncio.sleep(0)`` yield.

    ``sleep(0)`` suspends the current task and reschedules it behind every
    callback already ready on the loop, which is the Python equivalent of a
    minimal-delay timer.
    """

    def now(self) -> float:
        return time.perf_counter()

    async def yield_turn(self) -> None:
        await asyncio.sleep(0)


__all__ = ["Clock", "LoopClock"]
