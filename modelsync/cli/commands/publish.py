"""``modelsync publish`` — put a class-level message on the local queue."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from modelsync.bridge.transport import LocalTransport
from modelsync.config import settings
from modelsync.core.publisher import Publisher
from modelsync.core.registry import Registry
from modelsync.errors import ModelSyncError

console = Console()


def _parse_id(raw: str | None) -> int | str | None:
    if raw is None:
        return None
    return int(raw) if raw.lstrip("-").isdigit() else raw


def publish_cmd(
    class_name: str = typer.Argument(..., help="Entity class the message concerns."),
    action: str = typer.Argument(..., help="create, update, destroy or a custom action."),
    data: str = typer.Option("{}", "--data", "-d", help="JSON object payload."),
    id_value: str = typer.Option(None, "--id", help="Identity value of the entity."),
    queue_db: Path = typer.Option(
        None, "--queue-db", "-q", help="SQLite queue file (defaults to settings)."
    ),
    topic: str = typer.Option(None, "--topic", "-t", help="Topic (defaults to settings)."),
) -> None:
    """Publish one message to the SQLite-backed local queue."""
    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        console.print(f"[red]--data is not valid JSON:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    if not isinstance(payload, dict):
        console.print("[red]--data must be a JSON object.[/red]")
        raise typer.Exit(code=1)

    topic = topic or settings.topic_name
    queue_path = queue_db or settings.queue_db_path
    with LocalTransport(
        topic, max_local_queue=settings.max_local_queue, queue_db_path=queue_path
    ) as transport:
        publisher = Publisher(transport, Registry(), topic=topic)
        try:
            envelope = publisher.publish_data(
                class_name, payload, action, id_value=_parse_id(id_value)
            )
        except (ModelSyncError, ValidationError) as exc:
            console.print(f"[red]Publish failed:[/red] {exc}")
            raise typer.Exit(code=1) from exc
        depth = transport.local_queue_depth

    console.print(
        f"[green]Published[/green] {envelope.class_name}.{envelope.action} "
        f"on [bold]{topic}[/bold] (queue depth {depth})"
    )
