"""Emitter — builds outbound envelopes from local mutations.

Two shapes are produced:

* class-level messages (no entity): ``id`` and ``attrs`` are empty and the
  payload is whatever the caller supplies;
* entity-level messages: class, identity and payload are derived from the
  entity and its ``PublishSettings``.  Destroys carry an empty payload.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from modelsync.core.registry import target_name
from modelsync.models.bindings import PublishSettings
from modelsync.models.envelopes import SyncAction, SyncEnvelope, normalize_name, project_attrs
from modelsync.persistence import Entity


def build_envelope(
    target: Any,
    action: Any,
    settings: PublishSettings | None = None,
    *,
    data: Mapping[str, Any] | None = None,
    id_value: Any = None,
) -> SyncEnvelope:
    """Build the envelope for publishing *action* on *target*.

    *target* is either an ``Entity`` (entity-level) or anything naming a
    class (class-level: a string, an ``EntityType``, a class).
    """
    settings = settings or PublishSettings()
    if isinstance(target, Entity):
        return build_entity_envelope(target, action, settings)
    return build_class_envelope(
        settings.as_class or target_name(target), action, data or {}, id_value=id_value
    )


def build_class_envelope(
    class_name: Any, action: Any, data: Mapping[str, Any], *, id_value: Any = None
) -> SyncEnvelope:
    return SyncEnvelope(
        class_name=normalize_name(class_name),
        action=action,
        id=id_value,
        attrs=None,
        payload=dict(data),
    )


def build_entity_envelope(
    entity: Entity, action: Any, settings: PublishSettings
) -> SyncEnvelope:
    action_name = normalize_name(action)
    if action_name == SyncAction.DESTROY.value:
        payload: dict[str, Any] = {}
    else:
        payload = project_attrs(entity.values, settings.attrs)
    return SyncEnvelope(
        class_name=settings.as_class or entity.type_name,
        action=action_name,
        id=resolve_id(entity, settings),
        attrs=settings.attrs,
        payload=payload,
    )


def resolve_id(entity: Entity, settings: PublishSettings) -> Any:
    accessor = settings.id_accessor
    if accessor is None:
        return entity.id_value
    if callable(accessor):
        return accessor(entity)
    return entity.get(accessor)
