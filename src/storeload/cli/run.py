"""``storeload run``: execute a profile with live terminal output."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from storeload._internal.config import load_config
from storeload._internal.errors import StoreLoadError
from storeload._internal.logging import setup_logging
from storeload.engine.session import TestSession
from storeload.profiles import get_profile

if TYPE_CHECKING:
    from storeload.metrics.models import MetricSnapshot, TestResult

console = Console(stderr=True)


def _make_live_table(snapshot: MetricSnapshot | None) -> Table:
    """Build a table summarising the latest interval."""
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    if snapshot is None:
        table.add_row("Status", "Starting...")
        return table

    table.add_row("Elapsed", f"{snapshot.elapsed_seconds:.0f}s")
    table.add_row("Active Users", str(snapshot.active_users))
    table.add_row("Requests/sec", f"{snapshot.requests_per_second:.1f}")
    table.add_row("Requests", str(snapshot.total_requests))
    table.add_row("p50 Latency", f"{snapshot.latency_p50:.1f}ms")
    table.add_row("p95 Latency", f"{snapshot.latency_p95:.1f}ms")
    table.add_row("Errors", str(snapshot.total_errors))
    table.add_row("Error Rate", f"{snapshot.error_rate * 100:.2f}%")
    return table


def _print_summary(result: TestResult) -> None:
    """Print run, scenario and threshold tables."""
    summary = result.final_summary
    table = Table(title="Run Complete", show_header=True, header_style="bold green", expand=True)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Profile", result.profile_name)
    table.add_row("Stages", result.pattern_description)
    table.add_row("Duration", f"{result.duration_seconds:.1f}s")
    table.add_row("Iterations", str(result.total_iterations))
    if summary:
        table.add_row("Total Requests", str(summary.total_requests))
        table.add_row("Avg Requests/sec", f"{summary.requests_per_second:.1f}")
        table.add_row("p50 Latency", f"{summary.latency_p50:.1f}ms")
        table.add_row("p95 Latency", f"{summary.latency_p95:.1f}ms")
        table.add_row("p99 Latency", f"{summary.latency_p99:.1f}ms")
        table.add_row("Failed Requests", str(summary.total_errors))
        table.add_row("Check Failures", str(summary.check_failures))
        table.add_row("Error Rate", f"{summary.error_rate * 100:.2f}%")
        table.add_row("Data Received", f"{summary.bytes_received:,} B")
    console.print(table)

    if result.scenarios:
        sc_table = Table(
            title="Scenarios", show_header=True, header_style="bold cyan", expand=True
        )
        sc_table.add_column("Scenario")
        sc_table.add_column("Iterations", justify="right")
        sc_table.add_column("Failures", justify="right")
        sc_table.add_column("Avg", justify="right")
        sc_table.add_column("p95", justify="right")
        for stats in result.scenarios.values():
            sc_table.add_row(
                stats.name,
                str(stats.iterations),
                str(stats.failures),
                f"{stats.duration_avg:.0f}ms",
                f"{stats.duration_p95:.0f}ms",
            )
        console.print(sc_table)

    if result.thresholds:
        th_table = Table(
            title="Thresholds", show_header=True, header_style="bold cyan", expand=True
        )
        th_table.add_column("Metric")
        th_table.add_column("Expression")
        th_table.add_column("Observed", justify="right")
        th_table.add_column("Result", justify="center")
        for outcome in result.thresholds:
            th_table.add_row(
                outcome.metric,
                outcome.expression,
                f"{outcome.observed:,.3f}",
                "[green]PASS[/green]" if outcome.passed else "[red]FAIL[/red]",
            )
        console.print(th_table)


def run_cmd(
    profile_name: str = typer.Argument(
        ...,
        metavar="PROFILE",
        help="Profile to run: load, stress, spike, volume or endurance.",
    ),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        help="API root URL (default: STORELOAD_BASE_URL or the public fake store).",
    ),
    time_scale: float = typer.Option(
        1.0,
        "--time-scale",
        "-t",
        help="Multiply stage durations and think times; 0.05 turns 9 minutes into 27s.",
        min=0.001,
    ),
    tick: float = typer.Option(
        1.0,
        "--tick",
        help="Seconds between concurrency adjustments.",
        min=0.05,
    ),
    max_users: int | None = typer.Option(
        None,
        "--max-users",
        "-u",
        help="Cap concurrent virtual users.",
        min=1,
    ),
    seed: int | None = typer.Option(
        None,
        "--seed",
        help="Seed scenario selection for a reproducible mix.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit log records as one JSON object per line.",
    ),
) -> None:
    """Run a load profile and exit non-zero if any threshold fails."""
    setup_logging(logging.DEBUG if verbose else logging.INFO, json_format=json_logs)

    try:
        profile = get_profile(profile_name)
        config = load_config()
        if base_url:
            config = dataclasses.replace(config, base_url=base_url.rstrip("/"))
    except StoreLoadError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    stages = ", ".join(f"{s.duration}->{s.target}" for s in profile.stages)
    console.print(
        Panel(
            f"[bold]Profile:[/bold]  {profile.title}\n"
            f"[bold]Target:[/bold]   {config.base_url}\n"
            f"[bold]Stages:[/bold]   {stages}\n"
            f"[bold]Scale:[/bold]    x{time_scale:g}",
            title="storeload",
            border_style="cyan",
        )
    )

    try:
        with Live(
            _make_live_table(None),
            console=console,
            refresh_per_second=2,
            transient=True,
        ) as live:

            def _on_snapshot(snapshot: MetricSnapshot) -> None:
                live.update(_make_live_table(snapshot))

            session = TestSession(
                profile,
                config=config,
                time_scale=time_scale,
                tick_interval=tick,
                max_users=max_users,
                seed=seed,
                on_snapshot=_on_snapshot,
            )
            result = asyncio.run(session.run())
    except StoreLoadError as exc:
        console.print(f"[red]Run failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    _print_summary(result)

    if not result.thresholds_passed:
        failed = [f"{t.metric} {t.expression}" for t in result.thresholds if not t.passed]
        console.print(f"[red]FAIL:[/red] thresholds crossed: {'; '.join(failed)}")
        raise typer.Exit(code=1)

    console.print("[green]All thresholds passed.[/green]")
