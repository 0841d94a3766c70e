"""Main Typer application — imports and registers all CLI commands.

Entry point: ``modelsync`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from modelsync.cli.commands.bindings import bindings_cmd
from modelsync.cli.commands.config_cmd import config_cmd
from modelsync.cli.commands.consume import consume_cmd
from modelsync.cli.commands.demo import demo_cmd
from modelsync.cli.commands.publish import publish_cmd
from modelsync.config import settings
from modelsync.logging_setup import configure_logging

app = typer.Typer(
    name="modelsync",
    help="modelsync: keep entity state in sync across services over pub/sub.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", "-L", help="Log level (defaults to MODELSYNC_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    if log_level is None:
        log_level = "DEBUG" if settings.debug else settings.log_level
    configure_logging(log_level)


# Register subcommands
app.command(name="bindings", help="List registered bindings and publishers.")(bindings_cmd)
app.command(name="publish", help="Publish a class-level message to the local queue.")(publish_cmd)
app.command(name="consume", help="Deliver queued messages through a SyncContext.")(consume_cmd)
app.command(name="demo", help="Run the publish/subscribe demo scenario.")(demo_cmd)
app.command(name="config", help="Show effective settings.")(config_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
