"""
Root Typer application for the opledger CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from opledger import __version__

app = Typer(
    name="opledger",
    help="opledger — operation lifecycle engine for managed resources.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("opledger")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"opledger {v}")
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
    """opledger CLI — inspect operations, statuses, and run the API."""


# ── Sub-command registration ─────────────────────────────────────────────

from opledger.cli.operations import app as ops_app  # noqa: E402
from opledger.cli.serve import app as serve_app  # noqa: E402
from opledger.cli.statuses import statuses  # noqa: E402

app.add_typer(ops_app, name="ops", help="Inspect recorded operations.")
app.add_typer(serve_app, name="serve", help="Start the API server.")
app.command("statuses")(statuses)
