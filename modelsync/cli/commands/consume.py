"""``modelsync consume`` — deliver queued messages through a context."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from modelsync.cli.loading import load_context
from modelsync.config import settings
from modelsync.errors import ModelSyncError

console = Console()


def consume_cmd(
    app_ref: str = typer.Option(
        ..., "--app", "-a", help="SyncContext reference, as module:attribute."
    ),
    max_messages: int = typer.Option(
        None, "--max", "-n", help="Maximum messages to deliver (defaults to settings)."
    ),
) -> None:
    """Start the context and pump its transport once.

    The context's transport must support ``pump()`` (``LocalTransport`` does).
    """
    try:
        context = load_context(app_ref)
        context.start()
    except ModelSyncError as exc:
        console.print(f"[red]Cannot start context:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    pump = getattr(context.transport, "pump", None)
    if pump is None:
        console.print(
            f"[red]{type(context.transport).__name__} does not support pumping;[/red] "
            "run it under its own broker client."
        )
        raise typer.Exit(code=1)

    taken = pump(max_messages=max_messages or settings.drain_batch_size)
    stats = context.subscriber.stats
    border = "green" if stats["handler_failures"] == 0 else "yellow"
    console.print(
        Panel(
            "\n".join([
                f"[bold]Topic:[/bold]             {context.topic}",
                f"[bold]Messages taken:[/bold]    {taken}",
                f"[bold]Processed:[/bold]         {stats['processed']}",
                f"[bold]Ignored:[/bold]           {stats['ignored']}",
                f"[bold]Handler failures:[/bold]  {stats['handler_failures']}",
            ]),
            title="[bold]modelsync consume[/bold]",
            border_style=border,
            padding=(1, 2),
        )
    )
