"""In-memory entity store."""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from collections.abc import Mapping
from typing import Any

from modelsync.models.entities import EntityType
from modelsync.persistence.entity import Entity

logger = logging.getLogger(__name__)


class MemoryStore:
    """Volatile store keyed by entity type name and an internal row key.

    Rows are copied in and out so an entity handle never aliases stored
    state.  Entities saved without an identity value get the next integer
    from a per-store counter.
    """

    def __init__(self) -> None:
        self._rows: dict[str, dict[int, dict[str, Any]]] = {}
        self._keys = itertools.count(1)
        self._lock = threading.Lock()

    def find(self, entity_type: EntityType, key: str, value: Any) -> Entity | None:
        if value is None:
            return None
        with self._lock:
            for row_key, row in self._rows.get(entity_type.name, {}).items():
                if row.get(key) == value:
                    return Entity(
                        entity_type, copy.deepcopy(row), self, store_key=row_key
                    )
        return None

    def create(self, entity_type: EntityType, seed: Mapping[str, Any]) -> Entity:
        entity = Entity(entity_type, entity_type.blank(), self)
        for name, value in seed.items():
            entity.assign(name, value)
        return entity

    def save(self, entity: Entity) -> None:
        entity.entity_type.validate_values(entity.values)
        with self._lock:
            if entity.store_key is None:
                entity.store_key = next(self._keys)
            if entity.id_value is None:
                entity.values[entity.entity_type.id_field] = entity.store_key
            table = self._rows.setdefault(entity.type_name, {})
            table[entity.store_key] = copy.deepcopy(entity.values)
        logger.debug("MemoryStore: saved %s", entity)

    def delete(self, entity: Entity) -> None:
        if entity.store_key is None:
            return
        with self._lock:
            self._rows.get(entity.type_name, {}).pop(entity.store_key, None)
        entity.store_key = None
        logger.debug("MemoryStore: deleted %s", entity)

    def all(self, entity_type: EntityType) -> list[Entity]:
        """Return every stored entity of *entity_type*, in insertion order."""
        with self._lock:
            rows = list(self._rows.get(entity_type.name, {}).items())
        return [
            Entity(entity_type, copy.deepcopy(row), self, store_key=row_key)
            for row_key, row in rows
        ]

    def count(self, entity_type: EntityType) -> int:
        with self._lock:
            return len(self._rows.get(entity_type.name, {}))
