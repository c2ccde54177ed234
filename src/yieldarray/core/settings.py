"""Chunking settings for yieldarray.

The scheduler needs three numbers: how long a burst may run, how many
elements the very first burst processes before anything has been measured,
and the ceiling on burst length. ``ChunkSettings`` holds them, validated,
and reads overrides from ``YIELDARRAY_*`` environment variables or ``.env``.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** a zero budget fails at startup, not mid-traversal
    - **Environment-driven:** ``YIELDARRAY_BUDGET_MS=4`` tightens every burst
    - **Sensible defaults:** 10 ms bursts stay well inside one 60 Hz frame

Examples:
    >>> from yieldarray.core.settings import ChunkSettings
    >>> ChunkSettings(budget_ms=4).budget_seconds
    0.004

Tags:
    settings, configuration, pydantic, environment, yieldarray

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkSettings(BaseSettings):
    """Chunk scheduling configuration.

    Fields
    ──────
    budget_ms            : Target wall-clock milliseconds per burst
    initial_chunk_length : Elements processed by the first, unmeasured burst
    max_chunk_length     : Upper clamp on any burst's element count
    log_level            : Structlog log level
    log_format           : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="YIELDARRAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Chunking ─────────────────────────────────────────────────
    budget_ms: float = Field(default=10.0, gt=0, description="Target milliseconds per burst")
    initial_chunk_length: int = Field(default=8, ge=1)
    max_chunk_length: int = Field(default=100_000, ge=1)

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    @model_validator(mode="after")
    def _check_chunk_bounds(self) -> ChunkSettings:
        if self.initial_chunk_length > self.max_chunk_length:
            raise ValueError(
                f"initial_chunk_length ({self.initial_chunk_length}) must not exceed "
                f"max_chunk_length ({self.max_chunk_length})"
            )
        return self

    @property
    def budget_seconds(self) -> float:
        return self.budget_ms / 1000.0


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, ChunkSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ChunkSettings:
    """Load, validate, and cache a :class:`ChunkSettings` instance.

    Parameters
    ----------
    _force_reload:
        Discard the cached instance and re-read the environment.
    """
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = ChunkSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings (tests use this between env changes)."""
    _settings_cache.clear()


__all__ = ["ChunkSettings", "get_settings", "clear_settings_cache"]
