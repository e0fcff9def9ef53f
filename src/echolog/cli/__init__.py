"""echolog CLI -- typer-based command interface.

Commands:
    echolog demo echoes      Emit one echo of each kind and list the history
    echolog demo question    Ask a question, optionally answer it
    echolog config           Show the effective configuration
"""

from __future__ import annotations

from pathlib import Path

import typer
import yaml

from echolog.cli import demo
from echolog.cli._config import get_config, load_config
from echolog.logging import setup_logging

app = typer.Typer(
    name="echolog",
    help="Echo structured messages to the console and an in-process event bus.",
    no_args_is_help=True,
)

app.add_typer(demo.app, name="demo")


@app.callback()
def _main(
    config_path: Path = typer.Option(
        None, "--config", "-c", help="YAML config file (default ~/.echolog/config.yaml)."
    ),
) -> None:
    try:
        setup_logging(load_config(config_path))
    except ValueError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(1) from err


@app.command("config")
def show_config() -> None:
    """Print the effective configuration as YAML."""
    typer.echo(yaml.safe_dump(get_config().to_dict(), sort_keys=False).rstrip())


def main() -> None:
    """Entry point for the echolog CLI."""
    app()
