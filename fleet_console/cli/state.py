"""Shared CLI state: console, app."""

from __future__ import annotations

import typer
from rich.console import Console

# Rich console for all output
console = Console()

# Typer app
app = typer.Typer(
    name="fleet-console",
    help="Live console for a multi-agent control dashboard.",
    epilog=(
        "Examples:\n"
        "  fleet-console monitor\n"
        "  fleet-console monitor --url http://dashboard:5000\n"
        "  fleet-console monitor --config ./console.yaml --history 20"
    ),
    add_completion=False,
)


@app.callback()
def _root() -> None:
    """Live console for a multi-agent control dashboard."""
