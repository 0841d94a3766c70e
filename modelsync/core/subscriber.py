"""Subscriber — the transport's message callback.

Decodes a ``(payload, attributes)`` pair into a ``SyncEnvelope`` and hands
it to the dispatcher.  Messages on the topic that were not produced by
modelsync (no managed flag in their attributes) are ignored.  Codec and
envelope errors are raised back to the transport; handler errors never are.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from modelsync.bridge.transport import Transport
from modelsync.core.codec import Codec, JsonCodec
from modelsync.core.dispatcher import Dispatcher
from modelsync.models.envelopes import MANAGED_FLAG, SyncEnvelope
from modelsync.models.reports import DispatchReport

logger = logging.getLogger(__name__)


def is_managed(attributes: Mapping[str, Any]) -> bool:
    """Whether *attributes* carry the managed-sync flag (bool or string form)."""
    flag = attributes.get(MANAGED_FLAG)
    if isinstance(flag, str):
        return flag.strip().lower() in ("true", "1")
    return flag is True


class Subscriber:
    """Receives messages from a transport and processes them."""

    def __init__(self, dispatcher: Dispatcher, *, codec: Codec | None = None) -> None:
        self._dispatcher = dispatcher
        self._codec = codec or JsonCodec()
        self._counts = {"received": 0, "ignored": 0, "processed": 0, "handler_failures": 0}

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._counts)

    def start(self, transport: Transport) -> None:
        """Register ``on_message`` as *transport*'s receive callback."""
        transport.on_receive(self.on_message)

    def on_message(
        self, payload: bytes | str, attributes: Mapping[str, Any]
    ) -> DispatchReport | None:
        """Process one transport message.

        Returns the dispatch report, or ``None`` for an ignored message.
        """
        self._counts["received"] += 1
        if not is_managed(attributes):
            self._counts["ignored"] += 1
            logger.debug("Ignoring unmanaged message: %r", dict(attributes))
            return None

        data = self._codec.decode(payload)
        envelope = SyncEnvelope.from_message(data, attributes)
        report = self._dispatcher.process(envelope)
        self._counts["processed"] += 1
        self._counts["handler_failures"] += len(report.failed)
        return report
