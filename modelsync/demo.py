"""Demo scenario — a publisher and a subscriber sharing one in-memory queue.

``PublisherUser`` publishes ``name`` and ``email`` as class ``User``;
``SubscriberUser`` reconciles only ``name``.  A class-level ``greeting``
message goes to a direct handler.  Used by ``modelsync demo`` and as an
``--app`` target for the other commands
(``modelsync.demo:build_demo_context``).
"""

from __future__ import annotations

from typing import Any

from modelsync.bridge.transport import LocalTransport
from modelsync.core.context import SyncContext
from modelsync.models.entities import EntityType
from modelsync.models.reports import DispatchReport
from modelsync.persistence import MemoryStore

PUBLISHER_USER = EntityType(
    name="PublisherUser",
    field_types={"id": int, "name": str, "email": str, "age": int},
)

SUBSCRIBER_USER = EntityType(
    name="SubscriberUser",
    field_types={"id": int, "name": str, "email": str, "age": int},
)


class Greeter:
    """Direct-mode handler target."""

    def __init__(self) -> None:
        self.greetings: list[dict[str, Any]] = []

    def greeting(self, payload: dict[str, Any]) -> None:
        self.greetings.append(payload)


def build_demo_context(greeter: Greeter | None = None) -> SyncContext:
    """Wire the demo publisher/subscriber pair around one in-memory queue."""
    context = SyncContext(
        persistence=MemoryStore(),
        transport=LocalTransport("demo-sync"),
    )
    context.register_publish(PUBLISHER_USER, ["name", "email"], as_class="User")
    context.register_subscribe(SUBSCRIBER_USER, ["name"], as_class="User")
    context.register_subscribe(
        greeter or Greeter(), actions=["greeting"], as_class="User", direct_mode=True
    )
    return context


def run_demo(context: SyncContext | None = None) -> list[DispatchReport]:
    """Publish a create, an update, a greeting and a destroy, then deliver them."""
    context = context or build_demo_context()
    context.start()

    user = context.persistence.create(PUBLISHER_USER, {"id": 1})
    user.assign("name", "Ada")
    user.assign("email", "ada@example.com")
    user.save()
    context.publisher.notify(user, "create")

    user.assign("name", "Ada Lovelace")
    user.save()
    context.publisher.notify(user, "update")

    context.publisher.publish_data("User", {"message": "hello"}, "greeting")

    user.delete()
    context.publisher.notify(user, "destroy")

    reports: list[DispatchReport] = []
    while (message := context.transport.receive()) is not None:
        report = context.subscriber.on_message(*message)
        if report is not None:
            reports.append(report)
    return reports
