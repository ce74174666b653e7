"""CLI entry point for goal inspection tooling."""

import sys
from pathlib import Path

import click
from rich.console import Console

from cli.commands import history, inspect, legacy, transitions
from cli.config import load_config_model
from cli.logging_config import setup_logging
from observability import log_run_summary

console = Console()


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: ./goalctl.yaml or ~/.goals/config.yaml)",
)
@click.pass_context
def cli(ctx, verbose: bool, config_path):
    """Goal lifecycle tooling - statuses, progress and edit history."""
    try:
        config = load_config_model(config_path)
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    level = "DEBUG" if verbose else config.logging.level
    setup_logging(json_mode=config.logging.json_mode, level=level)
    ctx.call_on_close(log_run_summary)
    ctx.obj = {"config": config}


cli.add_command(transitions)
cli.add_command(inspect)
cli.add_command(history)
cli.add_command(legacy)


if __name__ == "__main__":
    cli()
