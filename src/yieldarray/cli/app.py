"""
Root Typer application for the yieldarray CLI.

Commands::

    yieldarray bench      run async_map with a synthetic visitor, show bursts
    yieldarray settings   show the resolved ChunkSettings
"""

from __future__ import annotations

import asyncio
import time

import typer
from pydantic import ValidationError

from yieldarray.cli.utils import err_console, print_mapping, print_rows
from yieldarray.core.logging import configure_logging
from yieldarray.core.settings import ChunkSettings, get_settings
from yieldarray.execution.operations import async_map
from yieldarray.execution.scheduler import BurstStats, ChunkScheduler
from yieldarray.execution.traversal import TraversalConfig

app = typer.Typer(
    name="yieldarray",
    help="yieldarray — non-blocking array traversals for asyncio.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from yieldarray import __version__

        typer.echo(f"yieldarray {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """yieldarray CLI — inspect chunk settings and measure burst sizing."""


def _busy_visitor(cost_seconds: float):
    def visit(x):
        deadline = time.perf_counter() + cost_seconds
        while time.perf_counter() < deadline:
            pass
        return x

    return visit


@app.command("bench")
def bench(
    size: int = typer.Option(10_000, "--size", "-n", min=0, help="Number of elements."),
    cost_us: float = typer.Option(5.0, "--cost-us", min=0.0, help="Busy-wait per element (µs)."),
    budget_ms: float | None = typer.Option(None, "--budget-ms", help="Override the burst budget."),
    json_out: bool = typer.Option(False, "--json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every burst."),
) -> None:
    """Map a synthetic visitor over ``range(size)`` and report every burst."""
    overrides = {} if budget_ms is None else {"budget_ms": budget_ms}
    try:
        settings = ChunkSettings(**overrides)
    except ValidationError as e:
        err_console.print(f"[bold red]Invalid settings[/bold red]: {e}")
        raise typer.Exit(code=1) from e

    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=json_out or settings.log_format == "json",
        service="yieldarray-bench",
    )

    bursts: list[BurstStats] = []

    def record(config: TraversalConfig, stats: BurstStats) -> None:
        bursts.append(stats)

    scheduler = ChunkScheduler(settings=settings, on_burst=record)
    outcome = asyncio.run(
        async_map(range(size), _busy_visitor(cost_us / 1_000_000), scheduler=scheduler)
    )

    print_rows([b.to_dict() for b in bursts], title="Bursts", as_json=json_out)
    if not json_out:
        print_mapping(
            {
                "elements": len(outcome.result),
                "success": outcome.success,
                "bursts": len(bursts),
                "budget_ms": settings.budget_ms,
                "max_burst_ms": round(max((b.elapsed_ms for b in bursts), default=0.0), 3),
            },
            title="Summary",
        )


@app.command("settings")
def show_settings(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the resolved chunk settings (``YIELDARRAY_*`` env vars applied)."""
    settings = get_settings(_force_reload=True)
    print_mapping(settings.model_dump(), title="Chunk settings", as_json=json_out)
