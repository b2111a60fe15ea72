"""``storeload profiles`` and ``storeload inspect``: browse the built-in profiles."""

from __future__ import annotations

import math

import typer
from rich.console import Console
from rich.table import Table

from storeload._internal.errors import StoreLoadError
from storeload.core.duration import total_minutes
from storeload.core.selector import effective_weights
from storeload.profiles import all_profiles, get_profile

console = Console()


def profiles_cmd() -> None:
    """List every built-in profile."""
    table = Table(title="Profiles", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Stages")
    table.add_column("Minutes", justify="right")
    table.add_column("Scenarios", justify="right")
    table.add_column("Description")

    for profile in all_profiles():
        table.add_row(
            profile.name,
            ", ".join(f"{s.duration}->{s.target}" for s in profile.stages),
            f"{total_minutes(profile.stages):g}",
            str(sum(1 for c in profile.scenarios.values() if c.enabled)),
            profile.description,
        )
    console.print(table)


def inspect_cmd(
    profile_name: str = typer.Argument(..., metavar="PROFILE", help="Profile to inspect."),
    minutes: int | None = typer.Option(
        None,
        "--minutes",
        "-m",
        help="Timeline length in minutes (default: the profile's total duration).",
        min=1,
    ),
) -> None:
    """Show scenario descriptions and effective weights per elapsed minute."""
    try:
        profile = get_profile(profile_name)
        scenarios = profile.build_scenarios()
    except StoreLoadError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    info = Table(title=f"{profile.title} scenarios", show_header=True, header_style="bold cyan")
    info.add_column("Scenario", style="bold")
    info.add_column("Base", justify="right")
    info.add_column("Description")
    for scenario in scenarios:
        info.add_row(
            scenario.name,
            f"{scenario.definition.base_weight:g}",
            scenario.definition.description,
        )
    console.print(info)

    horizon = minutes if minutes is not None else math.ceil(total_minutes(profile.stages))
    timeline = Table(title="Effective weight by minute", show_header=True, header_style="bold")
    timeline.add_column("Min", justify="right")
    timeline.add_column("Regime")
    for scenario in scenarios:
        timeline.add_column(scenario.name, justify="right")
    timeline.add_column("Think", justify="right")

    for minute in range(horizon + 1):
        weights = effective_weights(scenarios, minute)
        low, high = profile.think_time_for(minute)
        timeline.add_row(
            str(minute),
            profile.regime(minute).name,
            *(f"{w:g}" for w in weights.values()),
            f"{low:g}-{high:g}s",
        )
    console.print(timeline)
