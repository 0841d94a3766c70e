"""``modelsync bindings`` — list the registered subscriptions and publishers."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from modelsync.cli.loading import load_context
from modelsync.errors import ModelSyncError

console = Console()


def bindings_cmd(
    app_ref: str = typer.Option(
        "modelsync.demo:build_demo_context",
        "--app",
        "-a",
        help="SyncContext reference, as module:attribute.",
    ),
) -> None:
    """Show every binding in registration order, then the publishers."""
    try:
        context = load_context(app_ref)
    except ModelSyncError as exc:
        console.print(f"[red]Cannot load context:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    table = Table(title=f"Bindings ({len(context.registry)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Class", style="cyan")
    table.add_column("Action", style="green")
    table.add_column("Mode")
    table.add_column("Implementation")
    table.add_column("Identity")
    table.add_column("Allowed attrs")

    for index, binding in enumerate(context.registry, start=1):
        allowed = (
            ", ".join(sorted(binding.allowed_attrs))
            if binding.allowed_attrs is not None
            else "[dim]all[/dim]"
        )
        table.add_row(
            str(index),
            binding.target_class,
            binding.target_action,
            binding.mode.value,
            f"{binding.impl_class}.{binding.impl_action}",
            binding.identity_key or "[dim]default[/dim]",
            allowed,
        )
    console.print(table)

    publishers = context.registry.publishers
    if not publishers:
        console.print("[dim]No publishers registered.[/dim]")
        return

    pub_table = Table(title=f"Publishers ({len(publishers)})")
    pub_table.add_column("Entity type", style="cyan")
    pub_table.add_column("Publishes as")
    pub_table.add_column("Actions", style="green")
    pub_table.add_column("Attrs")
    for name, settings in publishers.items():
        pub_table.add_row(
            name,
            settings.as_class or name,
            ", ".join(settings.actions),
            ", ".join(sorted(settings.attrs)) if settings.attrs is not None else "[dim]all[/dim]",
        )
    console.print(pub_table)
