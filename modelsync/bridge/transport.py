"""Transport bridge — local pub/sub queue for sync messages.

The core only needs two things from a transport: ``publish(topic, payload,
attributes)`` and ``on_receive(handler)``.  A broker client (Google Pub/Sub,
Kafka, ...) satisfies the ``Transport`` protocol directly.  ``LocalTransport``
is the built-in implementation, with two queue backends:

1. **SQLite queue** (``queue_db_path`` provided): persistent, survives
   process restart, and lets a publishing process and a consuming process
   share one queue file.
2. **In-memory deque** (``queue_db_path`` is None): volatile, bounded,
   suitable for tests and single-process deployments.

Delivery is pull-based: ``pump()`` hands queued messages to the registered
handler on the calling thread.  A handler exception is logged and the
message is dropped; redelivery is not attempted.
"""

from __future__ import annotations

import collections
import json
import logging
import sqlite3
import threading
import uuid
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from modelsync.errors import TransportError

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes, dict[str, Any]], Any]


@runtime_checkable
class Transport(Protocol):
    """Capability the publisher and subscriber depend on."""

    def publish(self, topic: str, payload: bytes, attributes: Mapping[str, Any]) -> str:
        """Send *payload* with *attributes*; returns a message id."""
        ...

    def on_receive(self, handler: MessageHandler) -> None:
        """Register the callback that receives ``(payload, attributes)``."""
        ...


class LocalTransport:
    """Bounded local queue implementing the ``Transport`` protocol.

    Parameters
    ----------
    topic:
        The topic this transport subscribes to.  Messages published to
        other topics are queued but never delivered by this instance.
    max_local_queue:
        Maximum queue depth per topic.
    queue_db_path:
        Path to a SQLite database file for persistent queue storage.
        When ``None``, an in-memory deque is used (volatile).
    """

    def __init__(
        self,
        topic: str = "model-sync",
        *,
        max_local_queue: int = 1024,
        queue_db_path: Path | str | None = None,
    ) -> None:
        self._topic = topic
        self._max_local_queue = max_local_queue
        self._handler: MessageHandler | None = None
        self._published = 0
        self._delivered = 0
        self._failed = 0
        # Guards the shared connection and deques; pump may run on worker threads.
        self._lock = threading.RLock()

        self._db: sqlite3.Connection | None = None
        if queue_db_path is not None:
            db_path = Path(queue_db_path)
            db_path.parent.mkdir(parents=True, exist_ok=True)
            self._db = sqlite3.connect(str(db_path), check_same_thread=False)
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS queue ("
                "  id INTEGER PRIMARY KEY AUTOINCREMENT,"
                "  message_id TEXT NOT NULL,"
                "  topic TEXT NOT NULL,"
                "  payload BLOB NOT NULL,"
                "  attributes_json TEXT NOT NULL,"
                "  created_at TEXT DEFAULT (datetime('now'))"
                ")"
            )
            self._db.commit()
            logger.info(
                "LocalTransport: using SQLite queue at %s (max_depth=%d).",
                db_path,
                max_local_queue,
            )
        else:
            logger.info(
                "LocalTransport: using in-memory queue (max_depth=%d).",
                max_local_queue,
            )

        self._local_queues: dict[str, collections.deque[tuple[str, bytes, str]]] = (
            collections.defaultdict(collections.deque)
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def handler(self) -> MessageHandler | None:
        return self._handler

    @property
    def is_persistent(self) -> bool:
        return self._db is not None

    @property
    def local_queue_depth(self) -> int:
        """Number of messages waiting on this transport's topic."""
        return self._depth(self._topic)

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "published": self._published,
                "delivered": self._delivered,
                "failed": self._failed,
            }

    # ------------------------------------------------------------------
    # Transport protocol
    # ------------------------------------------------------------------

    def publish(self, topic: str, payload: bytes, attributes: Mapping[str, Any]) -> str:
        """Enqueue *payload* with *attributes* on *topic*.

        Raises
        ------
        TransportError
            If the queue is full or the attributes are not JSON-serializable.
        """
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        try:
            attributes_json = json.dumps(dict(attributes), sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise TransportError(f"Message attributes are not serializable: {exc}") from exc

        message_id = uuid.uuid4().hex
        with self._lock:
            depth = self._depth(topic)
            if depth >= self._max_local_queue:
                raise TransportError(
                    f"Local transport queue for {topic!r} is full "
                    f"(depth={depth}).  Message {message_id} dropped."
                )

            if self._db is not None:
                self._db.execute(
                    "INSERT INTO queue (message_id, topic, payload, attributes_json) "
                    "VALUES (?, ?, ?, ?)",
                    (message_id, topic, payload, attributes_json),
                )
                self._db.commit()
            else:
                self._local_queues[topic].append((message_id, payload, attributes_json))
            self._published += 1

        logger.debug(
            "LocalTransport.publish: queued %s on %s (depth=%d).",
            message_id,
            topic,
            depth + 1,
        )
        return message_id

    def on_receive(self, handler: MessageHandler) -> None:
        """Register the message callback, replacing any previous one."""
        self._handler = handler
        logger.info("LocalTransport: receiving on topic %s.", self._topic)

    # ------------------------------------------------------------------
    # Pull side
    # ------------------------------------------------------------------

    def receive(self) -> tuple[bytes, dict[str, Any]] | None:
        """Dequeue the oldest message on this topic, or ``None`` if empty."""
        with self._lock:
            if self._db is not None:
                row = self._db.execute(
                    "SELECT id, payload, attributes_json FROM queue "
                    "WHERE topic = ? ORDER BY id LIMIT 1",
                    (self._topic,),
                ).fetchone()
                if row is None:
                    return None
                row_id, payload, attributes_json = row
                self._db.execute("DELETE FROM queue WHERE id = ?", (row_id,))
                self._db.commit()
                payload = bytes(payload)
            else:
                queue = self._local_queues.get(self._topic)
                if not queue:
                    return None
                _, payload, attributes_json = queue.popleft()
        return payload, json.loads(attributes_json)

    def drain(self, *, max_messages: int = 100) -> list[tuple[bytes, dict[str, Any]]]:
        """Dequeue up to *max_messages* without delivering them."""
        messages = []
        for _ in range(max_messages):
            message = self.receive()
            if message is None:
                break
            messages.append(message)
        return messages

    def pump(self, *, max_messages: int = 100) -> int:
        """Deliver up to *max_messages* queued messages to the handler.

        Returns the number of messages taken off the queue.

        Raises
        ------
        TransportError
            If no handler has been registered with ``on_receive``.
        """
        if self._handler is None:
            raise TransportError("No receive handler registered; call on_receive() first")

        taken = 0
        for _ in range(max_messages):
            message = self.receive()
            if message is None:
                break
            taken += 1
            payload, attributes = message
            try:
                self._handler(payload, attributes)
            except Exception:
                with self._lock:
                    self._failed += 1
                logger.exception(
                    "LocalTransport: handler failed for message %r; dropping it.",
                    attributes,
                )
            else:
                with self._lock:
                    self._delivered += 1
        return taken

    def close(self) -> None:
        """Release the SQLite connection and clear in-memory queues."""
        with self._lock:
            if self._db is not None:
                self._db.close()
                self._db = None
            self._local_queues.clear()
        logger.info("LocalTransport: closed (topic=%s).", self._topic)

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> LocalTransport:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        backend = "sqlite-queue" if self._db is not None else "local-queue"
        return f"LocalTransport(topic={self._topic!r}, backend={backend})"

    def _depth(self, topic: str) -> int:
        with self._lock:
            if self._db is not None:
                row = self._db.execute(
                    "SELECT COUNT(*) FROM queue WHERE topic = ?", (topic,)
                ).fetchone()
                return row[0] if row else 0
            return len(self._local_queues.get(topic, ()))
