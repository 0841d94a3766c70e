"""SyncContext — the process-scoped wiring of registry, store and transport.

Initialization order is fixed: build the context, register every publisher
and subscription on ``context.registry``, then call ``start()``.  ``start()``
freezes the registry and attaches the subscriber to the transport; no
binding can be added after that point.
"""

from __future__ import annotations

import logging
from typing import Any

from modelsync.bridge.transport import LocalTransport, Transport
from modelsync.config import SyncSettings
from modelsync.core.codec import Codec, JsonCodec
from modelsync.core.dispatcher import Dispatcher
from modelsync.core.publisher import Publisher
from modelsync.core.reconciler import Reconciler
from modelsync.core.registry import Registry
from modelsync.core.subscriber import Subscriber
from modelsync.errors import ContextError
from modelsync.models.envelopes import SyncEnvelope
from modelsync.models.reports import DispatchReport
from modelsync.persistence import MemoryStore, Persistence, SQLiteStore

logger = logging.getLogger(__name__)


class SyncContext:
    """Everything a process needs to publish and receive sync messages.

    Parameters
    ----------
    persistence:
        Store used by the reconciler.
    transport:
        Transport used for both publishing and receiving.
    topic:
        Topic published to.  Defaults to the transport's own topic when it
        has one, else ``"model-sync"``.
    registry:
        Pre-populated registry; a fresh one is created when omitted.
    codec:
        Payload codec.  Defaults to canonical JSON.
    """

    def __init__(
        self,
        *,
        persistence: Persistence,
        transport: Transport,
        topic: str | None = None,
        registry: Registry | None = None,
        codec: Codec | None = None,
    ) -> None:
        self.registry = registry or Registry()
        self.persistence = persistence
        self.transport = transport
        self.codec = codec or JsonCodec()
        self.topic = topic or getattr(transport, "topic", None) or "model-sync"

        self.reconciler = Reconciler(persistence)
        self.dispatcher = Dispatcher(self.registry, self.reconciler)
        self.publisher = Publisher(
            transport, self.registry, topic=self.topic, codec=self.codec
        )
        self.subscriber = Subscriber(self.dispatcher, codec=self.codec)
        self._started = False

    @classmethod
    def from_settings(
        cls, settings: SyncSettings, *, in_memory: bool = False
    ) -> SyncContext:
        """Build a context on the built-in transport and store.

        ``in_memory=True`` (or unset paths) selects the volatile backends.
        """
        queue_path = None if in_memory else settings.queue_db_path
        store_path = None if in_memory else settings.store_db_path
        transport = LocalTransport(
            settings.topic_name,
            max_local_queue=settings.max_local_queue,
            queue_db_path=queue_path,
        )
        persistence: Persistence
        if store_path is None:
            persistence = MemoryStore()
        else:
            persistence = SQLiteStore(store_path)
        return cls(persistence=persistence, transport=transport, topic=settings.topic_name)

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Freeze the registry and begin receiving."""
        if self._started:
            raise ContextError("SyncContext already started")
        self.registry.freeze()
        self.subscriber.start(self.transport)
        self._started = True
        logger.info(
            "SyncContext started on topic %s with %d bindings",
            self.topic,
            len(self.registry),
        )

    def process(self, envelope: SyncEnvelope) -> DispatchReport:
        """Process an already-decoded envelope (bypassing the transport)."""
        if not self._started:
            raise ContextError("Call start() before processing messages")
        return self.dispatcher.process(envelope)

    def register_publish(self, *args: Any, **kwargs: Any) -> Any:
        return self.registry.register_publish(*args, **kwargs)

    def register_subscribe(self, *args: Any, **kwargs: Any) -> Any:
        return self.registry.register_subscribe(*args, **kwargs)
