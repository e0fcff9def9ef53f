"""CLI error handling."""

from __future__ import annotations

import typer


def handle_error(msg: str, code: int = 1) -> None:
    """Print an error message and exit."""
    typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(code)
