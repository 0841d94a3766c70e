"""Tests for the bundled demo scenario."""

from __future__ import annotations

from modelsync.demo import SUBSCRIBER_USER, Greeter, build_demo_context, run_demo


class TestDemo:
    def test_all_messages_processed(self):
        reports = run_demo()
        assert [(r.envelope.class_name, r.envelope.action) for r in reports] == [
            ("User", "create"),
            ("User", "update"),
            ("User", "greeting"),
            ("User", "destroy"),
        ]
        assert all(r.ok for r in reports)

    def test_greeter_receives_payload(self):
        greeter = Greeter()
        run_demo(build_demo_context(greeter))
        assert greeter.greetings == [{"message": "hello"}]

    def test_subscriber_copy_removed_by_destroy(self):
        context = build_demo_context()
        run_demo(context)
        assert context.persistence.count(SUBSCRIBER_USER) == 0

    def test_update_only_carries_published_attrs(self):
        reports = run_demo()
        update = reports[1].envelope
        assert update.payload == {"name": "Ada Lovelace", "email": "ada@example.com"}
        assert update.id == 1

    def test_bindings_registered(self):
        context = build_demo_context()
        described = [b.describe() for b in context.registry]
        assert len(described) == 4
        assert "PublisherUser" in context.registry.publishers
