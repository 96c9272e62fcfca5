"""CLI package for fleet-console."""

from .state import app

# Import subcommand modules so their @app.command() decorators register
from . import monitor as _monitor  # noqa: F401


def cli() -> None:
    """CLI entrypoint."""
    app(prog_name="fleet-console")


__all__ = ["app", "cli"]


if __name__ == "__main__":
    cli()
