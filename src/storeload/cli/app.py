"""Main Typer application: entry point for the ``storeload`` CLI."""

from __future__ import annotations

import typer

from storeload import __version__
from storeload.cli.profiles_cmd import inspect_cmd, profiles_cmd
from storeload.cli.run import run_cmd

app = typer.Typer(
    name="storeload",
    help="Weighted-scenario load profiles for the fake store API.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("run", help="Run a load profile against the API.")(run_cmd)
app.command("profiles", help="List the built-in profiles.")(profiles_cmd)
app.command("inspect", help="Show a profile's scenarios and weight timeline.")(inspect_cmd)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"storeload {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """storeload: weighted-scenario load profiles for the fake store API."""
