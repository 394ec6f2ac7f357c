# Copyright (c) Syntropy Systems
"""diskspeed run command - benchmark with a live status view."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import typer
from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from diskspeed.config import load_config
from diskspeed.engine import BenchmarkEngine
from diskspeed.exceptions import ConfigurationError
from diskspeed.models.benchmark import RunConfig

if TYPE_CHECKING:
    from collections.abc import Sequence

    from diskspeed.models.benchmark import EngineSnapshot, TestResultSnapshot

console = Console()

LOG_TAIL = 8


def format_speed(value: float | None) -> str:
    """Format an MB/s value for a table cell."""
    if value is None:
        return "-"
    return f"{value:.2f}"


def build_results_table(results: Sequence[TestResultSnapshot]) -> Table:
    """Build the per-test statistics table (MB/s)."""
    table = Table(title="Results (MB/s)", show_header=True, header_style="bold")
    table.add_column("Test", width=18)
    table.add_column("Last", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Avg", justify="right")
    table.add_column("Median", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Samples", justify="right", style="dim")

    for result in results:
        if not result.samples:
            table.add_row(result.name, "-", "-", "-", "-", "-", "0")
            continue
        table.add_row(
            result.name,
            format_speed(result.last),
            format_speed(result.min_speed),
            f"[bold]{format_speed(result.avg_speed)}[/bold]",
            format_speed(result.percentile(0.5)),
            format_speed(result.max_speed),
            str(result.count),
        )

    return table


def build_display(snapshot: EngineSnapshot) -> Group:
    """Build the live view: results, progress and the tail of the log."""
    status_style = {
        "idle": "green",
        "running": "blue",
        "cancelling": "yellow",
        "finishing": "cyan",
    }.get(snapshot.state.value, "white")

    header = (
        f"[{status_style}]{snapshot.state.value}[/{status_style}]  "
        f"iteration {snapshot.current_iteration}/{snapshot.iterations} "
        f"({snapshot.progress:.0%})  file size {snapshot.file_size_mb:.2f} MB"
    )
    progress = ProgressBar(
        total=max(snapshot.iterations, 1),
        completed=snapshot.current_iteration,
        width=60,
    )

    log_table = Table.grid()
    log_table.add_column(style="dim", no_wrap=True)
    for line in snapshot.logs[-LOG_TAIL:]:
        log_table.add_row(Text(line))

    return Group(
        build_results_table(snapshot.results),
        header,
        progress,
        "",
        log_table,
        "[dim](Ctrl+C to stop after the current iteration)[/dim]",
    )


def _watch_live(engine: BenchmarkEngine, refresh: float) -> None:
    with Live(build_display(engine.snapshot()), console=console, refresh_per_second=4) as live:
        while not engine.wait(timeout=refresh):
            live.update(build_display(engine.snapshot()))
        live.update(build_display(engine.snapshot()))


def _follow_log(engine: BenchmarkEngine, refresh: float) -> int:
    printed = 0
    while True:
        done = engine.wait(timeout=refresh)
        lines = engine.logs
        for line in lines[printed:]:
            console.print(line, markup=False, highlight=False, soft_wrap=True)
        printed = len(lines)
        if done:
            return printed


def run(
    size: Optional[float] = typer.Option(
        None,
        "--size", "-s",
        help="Scratch file size in MB (default from config)",
    ),
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations", "-n",
        help="Number of write/read cycles (default from config)",
    ),
    live: bool = typer.Option(
        True,
        "--live/--no-live",
        help="Show a live view instead of streaming log lines",
    ),
    refresh: float = typer.Option(
        0.5,
        "--refresh", "-r",
        help="Refresh interval in seconds",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Also emit Python logging output",
    ),
) -> None:
    """Measure sequential and random read/write throughput.

    Each iteration writes the scratch file sequentially, reads it back,
    then performs 4KB writes and reads at random offsets.

    Examples:

        diskspeed run

        diskspeed run --size 256 --iterations 20
    """
    config = load_config()

    try:
        run_config = RunConfig.create(
            size if size is not None else config.file_size_mb,
            iterations if iterations is not None else config.iterations,
        )
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise typer.Exit(1) from e

    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

    engine = BenchmarkEngine(config)
    engine.start(run_config.file_size_mb, run_config.iterations)

    try:
        if live:
            _watch_live(engine, refresh)
        else:
            _ = _follow_log(engine, refresh)
    except KeyboardInterrupt:
        engine.stop()
        console.print("\n[yellow]Stopping after the current iteration...[/yellow]")
        _ = engine.wait()

    snapshot = engine.snapshot()
    if not live:
        console.print(build_results_table(snapshot.results))

    if not any(result.samples for result in snapshot.results):
        console.print("[red]No samples collected[/red]")
        console.print(
            f"  scratch file: {engine.scratch_path}",
            markup=False, highlight=False, soft_wrap=True,
        )
        for line in snapshot.logs[-LOG_TAIL:]:
            console.print(f"  {line}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(1)

    console.print(
        f"[green]Completed {snapshot.current_iteration}/{snapshot.iterations} iterations[/green]"
    )
