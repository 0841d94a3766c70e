"""Publisher — sends local mutations to the transport."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from modelsync.bridge.transport import Transport
from modelsync.core.codec import Codec, JsonCodec
from modelsync.core.emitter import build_class_envelope, build_entity_envelope
from modelsync.core.registry import Registry, target_name
from modelsync.errors import RegistrationError
from modelsync.models.bindings import PublishSettings
from modelsync.models.envelopes import SyncEnvelope, normalize_name
from modelsync.persistence import Entity

logger = logging.getLogger(__name__)


class Publisher:
    """Builds envelopes and hands them to a transport.

    Parameters
    ----------
    transport:
        Where encoded messages are published.
    registry:
        Source of per-entity-type ``PublishSettings``.
    topic:
        Topic every message is published on.
    codec:
        Payload encoder.  Defaults to canonical JSON.
    """

    def __init__(
        self,
        transport: Transport,
        registry: Registry,
        *,
        topic: str,
        codec: Codec | None = None,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self._topic = topic
        self._codec = codec or JsonCodec()

    @property
    def topic(self) -> str:
        return self._topic

    def publish_data(
        self, target: Any, data: Mapping[str, Any], action: Any, *, id_value: Any = None
    ) -> SyncEnvelope:
        """Publish a class-level message carrying *data* as-is."""
        envelope = build_class_envelope(target_name(target), action, data, id_value=id_value)
        logger.info("Publishing data: %s", envelope.log_context())
        self.publish_envelope(envelope)
        return envelope

    def publish_model(
        self, entity: Entity, action: Any, settings: PublishSettings | None = None
    ) -> SyncEnvelope:
        """Publish *action* on *entity*.

        Uses the entity type's registered settings when *settings* is omitted.
        """
        settings = settings or self._settings_for(entity)
        envelope = build_entity_envelope(entity, action, settings)
        logger.info("Publishing model data: %s", envelope.log_context())
        self.publish_envelope(envelope)
        return envelope

    def notify(self, entity: Entity, action: Any) -> SyncEnvelope | None:
        """Mutation-callback entry point.

        Publishes only if the entity type's settings enable *action* and
        its ``skip_if`` hook does not veto it.
        """
        settings = self._settings_for(entity)
        action_name = normalize_name(action)
        if not settings.publishes(action_name):
            logger.debug("%s does not publish %s", entity.type_name, action_name)
            return None
        if settings.skip_if is not None and settings.skip_if(entity, action_name):
            logger.debug("Skipped publishing %s.%s", entity.type_name, action_name)
            return None
        return self.publish_model(entity, action_name, settings)

    def publish_envelope(self, envelope: SyncEnvelope) -> str:
        payload = self._codec.encode(envelope.payload)
        return self._transport.publish(self._topic, payload, envelope.to_attributes())

    def _settings_for(self, entity: Entity) -> PublishSettings:
        settings = self._registry.publish_settings_for(entity.entity_type)
        if settings is None:
            raise RegistrationError(f"{entity.type_name} is not registered for publishing")
        return settings
