"""Unit tests for LocalTransport — in-memory and SQLite queues, pump delivery."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import pytest

from modelsync.bridge.transport import LocalTransport, Transport
from modelsync.errors import TransportError

_ATTRS = {"class": "User", "action": "create", "id": 1, "service_model_sync": True}


# ---------------------------------------------------------------------------
# Test: In-memory queue
# ---------------------------------------------------------------------------


class TestLocalTransportInMemory:
    def test_publish_receive_round_trip(self):
        t = LocalTransport("sync", max_local_queue=10)
        message_id = t.publish("sync", b'{"a":1}', _ATTRS)
        assert message_id

        payload, attributes = t.receive()
        assert payload == b'{"a":1}'
        assert attributes == _ATTRS

    def test_fifo_ordering(self):
        t = LocalTransport("sync", max_local_queue=10)
        t.publish("sync", b"1", _ATTRS)
        t.publish("sync", b"2", _ATTRS)
        assert t.receive()[0] == b"1"
        assert t.receive()[0] == b"2"

    def test_receive_returns_none_when_empty(self):
        assert LocalTransport().receive() is None

    def test_other_topic_not_delivered(self):
        t = LocalTransport("sync")
        t.publish("elsewhere", b"{}", _ATTRS)
        assert t.receive() is None
        assert t.local_queue_depth == 0

    def test_queue_full_raises(self):
        t = LocalTransport("sync", max_local_queue=2)
        t.publish("sync", b"1", _ATTRS)
        t.publish("sync", b"2", _ATTRS)
        with pytest.raises(TransportError, match="full"):
            t.publish("sync", b"3", _ATTRS)

    def test_unserializable_attributes(self):
        t = LocalTransport("sync")
        with pytest.raises(TransportError, match="not serializable"):
            t.publish("sync", b"{}", {"id": object()})

    def test_drain_returns_all(self):
        t = LocalTransport("sync", max_local_queue=10)
        for _ in range(3):
            t.publish("sync", b"{}", _ATTRS)
        assert len(t.drain()) == 3
        assert t.local_queue_depth == 0

    def test_satisfies_protocol(self):
        assert isinstance(LocalTransport(), Transport)


# ---------------------------------------------------------------------------
# Test: SQLite-backed queue
# ---------------------------------------------------------------------------


class TestLocalTransportSQLite:
    def test_persists_across_instances(self, tmp_path: Path):
        db = tmp_path / "queue.db"
        with LocalTransport("sync", queue_db_path=db) as writer:
            writer.publish("sync", b'{"a":1}', _ATTRS)
            assert writer.is_persistent

        with LocalTransport("sync", queue_db_path=db) as reader:
            assert reader.local_queue_depth == 1
            payload, attributes = reader.receive()
        assert payload == b'{"a":1}'
        assert attributes["class"] == "User"

    def test_fifo_ordering(self, tmp_path: Path):
        t = LocalTransport("sync", queue_db_path=tmp_path / "q.db")
        t.publish("sync", b"1", _ATTRS)
        t.publish("sync", b"2", _ATTRS)
        assert [m[0] for m in t.drain()] == [b"1", b"2"]
        t.close()

    def test_queue_full(self, tmp_path: Path):
        t = LocalTransport("sync", max_local_queue=1, queue_db_path=tmp_path / "q.db")
        t.publish("sync", b"1", _ATTRS)
        with pytest.raises(TransportError):
            t.publish("sync", b"2", _ATTRS)
        t.close()

    def test_repr(self, tmp_path: Path):
        t = LocalTransport("sync", queue_db_path=tmp_path / "q.db")
        assert "sqlite-queue" in repr(t)
        t.close()
        assert "local-queue" in repr(LocalTransport("sync"))


# ---------------------------------------------------------------------------
# Test: pump delivery
# ---------------------------------------------------------------------------


class TestPump:
    def test_pump_requires_handler(self):
        with pytest.raises(TransportError, match="on_receive"):
            LocalTransport().pump()

    def test_pump_delivers_to_handler(self):
        t = LocalTransport("sync")
        received: list[tuple[bytes, dict[str, Any]]] = []
        t.on_receive(lambda payload, attributes: received.append((payload, attributes)))
        t.publish("sync", b"1", _ATTRS)
        t.publish("sync", b"2", _ATTRS)

        assert t.pump() == 2
        assert [p for p, _ in received] == [b"1", b"2"]
        assert t.stats == {"published": 2, "delivered": 2, "failed": 0}

    def test_pump_respects_max_messages(self):
        t = LocalTransport("sync")
        t.on_receive(lambda payload, attributes: None)
        for _ in range(5):
            t.publish("sync", b"{}", _ATTRS)
        assert t.pump(max_messages=2) == 2
        assert t.local_queue_depth == 3

    def test_handler_failure_drops_message_and_continues(self):
        t = LocalTransport("sync")
        seen: list[bytes] = []

        def _handler(payload: bytes, attributes: dict[str, Any]) -> None:
            seen.append(payload)
            if payload == b"bad":
                raise ValueError("poison")

        t.on_receive(_handler)
        t.publish("sync", b"bad", _ATTRS)
        t.publish("sync", b"good", _ATTRS)

        assert t.pump() == 2
        assert seen == [b"bad", b"good"]
        assert t.stats["failed"] == 1
        assert t.local_queue_depth == 0


# ---------------------------------------------------------------------------
# Test: concurrent access
# ---------------------------------------------------------------------------


class TestConcurrentAccess:
    @pytest.mark.parametrize("persistent", [False, True])
    def test_threaded_publish_and_receive(self, tmp_path: Path, persistent: bool):
        db = tmp_path / "q.db" if persistent else None
        t = LocalTransport("sync", max_local_queue=1000, queue_db_path=db)
        per_thread = 25

        def _publish(n: int) -> None:
            for i in range(per_thread):
                t.publish("sync", f"{n}-{i}".encode(), _ATTRS)

        publishers = [threading.Thread(target=_publish, args=(n,)) for n in range(4)]
        for thread in publishers:
            thread.start()
        for thread in publishers:
            thread.join()
        assert t.local_queue_depth == 4 * per_thread

        received: list[bytes] = []
        received_lock = threading.Lock()

        def _consume() -> None:
            while (message := t.receive()) is not None:
                with received_lock:
                    received.append(message[0])

        consumers = [threading.Thread(target=_consume) for _ in range(4)]
        for thread in consumers:
            thread.start()
        for thread in consumers:
            thread.join()

        assert len(received) == 4 * per_thread
        assert len(set(received)) == 4 * per_thread
        assert t.stats["published"] == 4 * per_thread
        t.close()
