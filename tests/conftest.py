"""
Shared pytest fixtures for yieldarray tests.

This module provides:
- Cache cleanup for the default settings and scheduler (test isolation)
- ``FakeClock``: a deterministic clock whose time only moves when a test
  (usually the visitor) advances it
- Small-chunk settings that force many bursts over short arrays

Usage:
    def test_bursts(fake_clock, tiny_settings):
        scheduler = ChunkScheduler(settings=tiny_settings, clock=fake_clock)
"""

from __future__ import annotations

import asyncio
from collections.abc import Generator

import pytest

from yieldarray.core.settings import ChunkSettings, clear_settings_cache
from yieldarray.execution.scheduler import reset_scheduler


class FakeClock:
    """Clock whose time advances only via :meth:`advance`.

    ``yield_turn`` still suspends on the real loop so concurrent tasks
    interleave, and counts how often it was called.
    """

    def __init__(self) -> None:
        self.time = 0.0
        self.yields = 0

    def now(self) -> float:
        return self.time

    def advance(self, seconds: float) -> None:
        self.time += seconds

    async def yield_turn(self) -> None:
        self.yields += 1
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def fresh_defaults(monkeypatch) -> Generator[None, None, None]:
    """Each test starts with no cached settings or default scheduler."""
    for key in ("BUDGET_MS", "INITIAL_CHUNK_LENGTH", "MAX_CHUNK_LENGTH", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"YIELDARRAY_{key}", raising=False)
    clear_settings_cache()
    reset_scheduler()
    yield
    clear_settings_cache()
    reset_scheduler()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tiny_settings() -> ChunkSettings:
    """One element in the first burst, at most three in any burst."""
    return ChunkSettings(initial_chunk_length=1, max_chunk_length=3)
