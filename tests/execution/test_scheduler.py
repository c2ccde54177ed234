"""Tests for ChunkBudget and ChunkScheduler — adaptive bursts and yielding."""

from __future__ import annotations

import asyncio

import pytest
from structlog.testing import capture_logs

from yieldarray.core.errors import InvalidConfigError, VisitorError
from yieldarray.core.result import Outcome
from yieldarray.core.settings import ChunkSettings
from yieldarray.execution.operations import for_each_config, map_config
from yieldarray.execution.scheduler import (
    BurstStats,
    ChunkBudget,
    ChunkScheduler,
    get_scheduler,
    reset_scheduler,
)


# ── Helpers ──────────────────────────────────────────────────────────────


def _costly(clock, cost):
    """Visitor that charges ``cost`` seconds of fake time per element."""

    def visit(x):
        clock.advance(cost)
        return x

    return visit


def _recording_scheduler(settings, clock):
    bursts: list[BurstStats] = []
    scheduler = ChunkScheduler(
        settings=settings, clock=clock, on_burst=lambda config, stats: bursts.append(stats)
    )
    return scheduler, bursts


# ── ChunkBudget ──────────────────────────────────────────────────────────


class TestChunkBudget:
    def test_from_settings(self):
        budget = ChunkBudget.from_settings(ChunkSettings(budget_ms=5, initial_chunk_length=4))
        assert budget.target_seconds == pytest.approx(0.005)
        assert budget.chunk_length == 4
        assert budget.max_length == 100_000
        assert budget.seconds_per_element is None

    def test_sizes_to_budget(self):
        budget = ChunkBudget(target_seconds=0.5, chunk_length=8, max_length=1000)
        assert budget.update(processed=8, elapsed=0.25) == 16
        assert budget.seconds_per_element == 0.03125

    def test_minimum_one(self):
        budget = ChunkBudget(target_seconds=0.01, chunk_length=8, max_length=1000)
        assert budget.update(processed=2, elapsed=1.0) == 1

    def test_clamped_to_max(self):
        budget = ChunkBudget(target_seconds=0.01, chunk_length=8, max_length=50)
        assert budget.update(processed=8, elapsed=1e-9) == 50

    def test_unmeasurable_burst_doubles(self):
        budget = ChunkBudget(target_seconds=0.01, chunk_length=8, max_length=1000)
        assert budget.update(processed=8, elapsed=0.0) == 16
        assert budget.update(processed=16, elapsed=0.0) == 32

    def test_empty_burst_keeps_length(self):
        budget = ChunkBudget(target_seconds=0.01, chunk_length=8, max_length=1000)
        assert budget.update(processed=0, elapsed=0.5) == 8
        assert budget.seconds_per_element is None

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"target_seconds": 0, "chunk_length": 1, "max_length": 1},
            {"target_seconds": 0.01, "chunk_length": 1, "max_length": 0},
            {"target_seconds": 0.01, "chunk_length": 0, "max_length": 5},
            {"target_seconds": 0.01, "chunk_length": 6, "max_length": 5},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(InvalidConfigError):
            ChunkBudget(**kwargs)


class TestBurstStats:
    def test_to_dict(self):
        stats = BurstStats(burst=1, chunk_length=8, processed=8,
                           elapsed_seconds=0.00125, next_chunk_length=64)
        assert stats.elapsed_ms == pytest.approx(1.25)
        assert stats.to_dict() == {
            "burst": 1,
            "chunk_length": 8,
            "processed": 8,
            "elapsed_ms": 1.25,
            "next_chunk_length": 64,
        }


# ── ChunkScheduler.run ───────────────────────────────────────────────────


class TestAdaptiveSizing:
    @pytest.mark.asyncio
    async def test_first_burst_uses_initial_length(self, fake_clock):
        scheduler, bursts = _recording_scheduler(ChunkSettings(), fake_clock)
        arr = list(range(200))
        await scheduler.run(map_config(arr, _costly(fake_clock, 0.001)), arr)
        assert bursts[0].chunk_length == 8
        assert bursts[0].processed == 8

    @pytest.mark.asyncio
    async def test_bursts_converge_on_budget(self, fake_clock):
        scheduler, bursts = _recording_scheduler(ChunkSettings(budget_ms=10), fake_clock)
        arr = list(range(200))
        outcome = await scheduler.run(map_config(arr, _costly(fake_clock, 0.001)), arr)

        assert outcome == Outcome(arr, True)
        assert 9 <= bursts[0].next_chunk_length <= 10
        assert all(b.elapsed_seconds <= 0.02 + 1e-9 for b in bursts[1:])
        assert sum(b.processed for b in bursts) == 200

    @pytest.mark.asyncio
    async def test_expensive_visitor_gets_single_element_bursts(self, fake_clock):
        scheduler, bursts = _recording_scheduler(ChunkSettings(budget_ms=10), fake_clock)
        arr = list(range(20))
        await scheduler.run(map_config(arr, _costly(fake_clock, 0.05)), arr)
        assert bursts[0].processed == 8
        assert [b.chunk_length for b in bursts[1:]] == [1] * 12

    @pytest.mark.asyncio
    async def test_adapts_when_cost_rises(self, fake_clock):
        scheduler, bursts = _recording_scheduler(ChunkSettings(budget_ms=10), fake_clock)

        def visit(x):
            fake_clock.advance(0.0001 if x < 500 else 0.002)
            return x

        arr = list(range(1000))
        await scheduler.run(map_config(arr, visit), arr)
        assert max(b.chunk_length for b in bursts) >= 50
        assert bursts[-1].chunk_length <= 5

    @pytest.mark.asyncio
    async def test_unmeasurable_bursts_double(self, fake_clock):
        scheduler, bursts = _recording_scheduler(ChunkSettings(), fake_clock)
        arr = list(range(100))
        await scheduler.run(map_config(arr, lambda x: x), arr)
        assert [b.chunk_length for b in bursts] == [8, 16, 32, 64]
        assert [b.processed for b in bursts] == [8, 16, 32, 44]

    @pytest.mark.asyncio
    async def test_never_exceeds_max_length(self, fake_clock, tiny_settings):
        scheduler, bursts = _recording_scheduler(tiny_settings, fake_clock)
        arr = list(range(10))
        await scheduler.run(map_config(arr, lambda x: x), arr)
        assert [b.chunk_length for b in bursts] == [1, 2, 3, 3, 3]
        assert [b.processed for b in bursts] == [1, 2, 3, 3, 1]


class TestYielding:
    @pytest.mark.asyncio
    async def test_yields_before_every_burst(self, fake_clock, tiny_settings):
        scheduler, bursts = _recording_scheduler(tiny_settings, fake_clock)
        arr = list(range(10))
        await scheduler.run(map_config(arr, lambda x: x), arr)
        assert fake_clock.yields == len(bursts)

    @pytest.mark.asyncio
    async def test_empty_array_yields_once(self, fake_clock):
        scheduler, bursts = _recording_scheduler(ChunkSettings(), fake_clock)
        outcome = await scheduler.run(map_config([], lambda x: x), [])
        assert outcome == Outcome([], True)
        assert fake_clock.yields == 1
        assert len(bursts) == 1
        assert bursts[0].processed == 0
        assert bursts[0].next_chunk_length == 8

    @pytest.mark.asyncio
    async def test_loop_runs_before_resolution(self):
        ran: list[bool] = []
        asyncio.get_running_loop().call_soon(ran.append, True)
        await ChunkScheduler(settings=ChunkSettings()).run(map_config([], lambda x: x), [])
        assert ran == [True]

    @pytest.mark.asyncio
    async def test_concurrent_traversals_interleave(self, fake_clock, tiny_settings):
        scheduler = ChunkScheduler(settings=tiny_settings, clock=fake_clock)
        order: list[tuple[str, int]] = []

        def tagged(tag):
            return lambda x, i: order.append((tag, i))

        a, b = list(range(12)), list(range(12))
        await asyncio.gather(
            scheduler.run(for_each_config(a, tagged("a")), a),
            scheduler.run(for_each_config(b, tagged("b")), b),
        )

        assert [i for tag, i in order if tag == "a"] == list(range(12))
        assert [i for tag, i in order if tag == "b"] == list(range(12))
        first_b = order.index(("b", 0))
        last_a = order.index(("a", 11))
        assert first_b < last_a


class TestStopAndFailure:
    @pytest.mark.asyncio
    async def test_no_bursts_after_stop(self, fake_clock, tiny_settings):
        scheduler, bursts = _recording_scheduler(tiny_settings, fake_clock)
        seen: list[int] = []

        def visit(x, i, arr, stop):
            seen.append(i)
            if i == 4:
                stop()

        arr = list(range(50))
        outcome = await scheduler.run(for_each_config(arr, visit), arr)
        assert outcome.success is False
        assert outcome.result is arr
        assert seen == [0, 1, 2, 3, 4]
        assert sum(b.processed for b in bursts) == 5

    @pytest.mark.asyncio
    async def test_visitor_error_wraps_cause(self, fake_clock, tiny_settings):
        scheduler, bursts = _recording_scheduler(tiny_settings, fake_clock)
        seen: list[int] = []

        def visit(x, i):
            seen.append(i)
            if i == 5:
                raise ValueError("bad element")
            return x

        arr = list(range(20))
        with pytest.raises(VisitorError) as excinfo:
            await scheduler.run(map_config(arr, visit), arr)

        err = excinfo.value
        assert isinstance(err.cause, ValueError)
        assert err.__cause__ is err.cause
        assert err.index == 5
        assert err.operation == "map"
        assert err.context.burst == len(bursts) + 1
        assert seen == [0, 1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_logs_stop_and_failure(self, fake_clock):
        scheduler = ChunkScheduler(settings=ChunkSettings(), clock=fake_clock)
        arr = [1, 2, 3]

        with capture_logs() as logs:
            await scheduler.run(for_each_config(arr, lambda x, i, a, stop: stop()), arr)
            with pytest.raises(VisitorError):
                await scheduler.run(map_config(arr, lambda x: 1 / 0), arr)

        events = {entry["event"]: entry for entry in logs}
        assert events["traversal.stopped"]["log_level"] == "info"
        assert events["traversal.stopped"]["visited"] == 1
        assert events["traversal.failed"]["log_level"] == "warning"
        assert events["traversal.failed"]["index"] == 0
        assert "traversal.burst" in events


class TestSubmit:
    @pytest.mark.asyncio
    async def test_returns_named_task(self):
        scheduler = ChunkScheduler(settings=ChunkSettings())
        arr = [1, 2, 3]
        task = scheduler.submit(map_config(arr, lambda x: x + 1), arr)
        assert isinstance(task, asyncio.Task)
        assert task.get_name() == "yieldarray.map"
        assert await task == Outcome([2, 3, 4], True)

    @pytest.mark.asyncio
    async def test_task_carries_visitor_error(self):
        scheduler = ChunkScheduler(settings=ChunkSettings())
        arr = [1]
        task = scheduler.submit(map_config(arr, lambda x: 1 / 0), arr)
        with pytest.raises(VisitorError):
            await task
        assert task.done()


class TestDefaultScheduler:
    def test_cached(self):
        assert get_scheduler() is get_scheduler()

    def test_reset_rereads_settings(self, monkeypatch):
        first = get_scheduler()
        monkeypatch.setenv("YIELDARRAY_BUDGET_MS", "3")
        from yieldarray.core.settings import clear_settings_cache

        clear_settings_cache()
        reset_scheduler()
        scheduler = get_scheduler()
        assert scheduler is not first
        assert scheduler.settings.budget_ms == 3.0


@pytest.mark.slow
class TestRealClock:
    @pytest.mark.asyncio
    async def test_bursts_stay_near_budget(self):
        import statistics
        import time

        def busy(x):
            deadline = time.perf_counter() + 20e-6
            while time.perf_counter() < deadline:
                pass
            return x

        bursts: list[BurstStats] = []
        scheduler = ChunkScheduler(
            settings=ChunkSettings(budget_ms=2),
            on_burst=lambda config, stats: bursts.append(stats),
        )
        arr = list(range(3000))
        outcome = await scheduler.run(map_config(arr, busy), arr)

        assert outcome.result == arr
        assert len(bursts) > 5
        assert statistics.median(b.elapsed_ms for b in bursts[1:]) < 10
