"""``modelsync config`` — show the effective settings."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from modelsync.config import SyncSettings

console = Console()


def config_cmd() -> None:
    """Print settings after ``.env`` and ``MODELSYNC_*`` overrides."""
    current = SyncSettings()
    table = Table(title="modelsync settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in current.model_dump().items():
        table.add_row(name, "[dim]unset[/dim]" if value is None else str(value))
    console.print(table)
