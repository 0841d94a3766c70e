"""Reconciler — applies an inbound envelope to local entity state.

For a destroy the entity is looked up by identity and deleted if present;
deleting something that is not there is a no-op.  Every other action is an
upsert: find by identity or create a new entity seeded with the identity
value, merge the allow-listed payload attributes, save.

Errors (missing identity, invalid attribute values, failed saves) propagate
to the dispatcher, which isolates them per binding.
"""

from __future__ import annotations

import logging

from modelsync.errors import MissingIdentityError, ReconciliationError
from modelsync.models.bindings import BindingMode, HandlerBinding
from modelsync.models.envelopes import SyncEnvelope, project_attrs
from modelsync.persistence import Entity, Persistence

logger = logging.getLogger(__name__)


class Reconciler:
    """Upserts and deletes entities through a ``Persistence`` capability.

    Parameters
    ----------
    persistence:
        The store entities are found in, created through, and saved to.
    """

    def __init__(self, persistence: Persistence) -> None:
        self._persistence = persistence

    @property
    def persistence(self) -> Persistence:
        return self._persistence

    def reconcile(self, envelope: SyncEnvelope, binding: HandlerBinding) -> Entity | None:
        """Apply *envelope* through *binding*.

        Returns the saved entity for an upsert, ``None`` for a destroy.
        """
        entity_type = binding.entity_type
        if binding.mode is not BindingMode.RECONCILING or entity_type is None:
            raise ReconciliationError(
                f"Binding {binding.describe()} is not a reconciling binding"
            )

        key = binding.identity_key or entity_type.id_field
        id_value = envelope.id
        if id_value is None:
            raise MissingIdentityError(
                f"{envelope.class_name}.{envelope.action} carries no identity "
                f"value for {entity_type.name}.{key}"
            )
        # Look up by the stored form: "5" on the wire is 5 in an int field.
        id_value = entity_type.coerce(key, id_value)

        entity = self._persistence.find(entity_type, key, id_value)

        if envelope.is_destroy:
            if entity is None:
                logger.debug(
                    "Nothing to destroy: %s.%s=%r not found", entity_type.name, key, id_value
                )
                return None
            entity.delete()
            logger.debug("Destroyed %s.%s=%r", entity_type.name, key, id_value)
            return None

        if entity is None:
            entity = self._persistence.create(entity_type, {key: id_value})

        for attr, value in self._merge_values(envelope, binding).items():
            entity.assign(attr, value)
        entity.save()
        return entity

    @staticmethod
    def _merge_values(envelope: SyncEnvelope, binding: HandlerBinding) -> dict:
        entity_type = binding.entity_type
        values = project_attrs(envelope.payload, binding.allowed_attrs)
        if binding.allowed_attrs is None:
            # No allow-list: take only what the entity type can hold.
            values = {k: v for k, v in values.items() if entity_type.has_field(k)}
        return values
