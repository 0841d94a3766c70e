"""``modelsync demo`` — run the publish/subscribe demo scenario.

Publishes a create, an update, a class-level greeting and a destroy from
``PublisherUser`` and shows how each one was handled on the subscriber side.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from modelsync.demo import Greeter, build_demo_context, run_demo

console = Console()


def demo_cmd() -> None:
    """Run the demo scenario against an in-memory queue and store."""
    greeter = Greeter()
    reports = run_demo(build_demo_context(greeter))

    table = Table(title="Processed messages")
    table.add_column("Class", style="cyan")
    table.add_column("Action", style="green")
    table.add_column("Id", justify="right")
    table.add_column("Payload")
    table.add_column("Handlers")
    table.add_column("Status", justify="center")

    for report in reports:
        envelope = report.envelope
        handlers = "\n".join(o.binding for o in report.outcomes) or "[dim]none[/dim]"
        status = "[green]OK[/green]" if report.ok else "[red]FAILED[/red]"
        table.add_row(
            envelope.class_name,
            envelope.action,
            "" if envelope.id is None else str(envelope.id),
            str(envelope.payload),
            handlers,
            status,
        )

    console.print()
    console.print(table)
    console.print(f"[bold]Greetings received:[/bold] {len(greeter.greetings)}")
    console.print()
