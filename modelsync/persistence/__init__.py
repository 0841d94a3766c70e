"""Persistence capability used by the reconciler.

The reconciler never owns entity lifetime.  It asks a ``Persistence``
implementation to find or create records and then calls ``save()`` or
``delete()`` on the returned ``Entity``.  Two stores ship with the library:
``MemoryStore`` for tests and single-process use, and ``SQLiteStore`` for
durable local state.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from modelsync.models.entities import EntityType
from modelsync.persistence.entity import Entity


@runtime_checkable
class Persistence(Protocol):
    """Minimal storage capability the reconciler requires."""

    def find(self, entity_type: EntityType, key: str, value: Any) -> Entity | None:
        """Return the first entity whose field *key* equals *value*, or ``None``."""
        ...

    def create(self, entity_type: EntityType, seed: Mapping[str, Any]) -> Entity:
        """Construct a new, unsaved entity with *seed* applied."""
        ...

    def save(self, entity: Entity) -> None:
        """Validate and persist *entity* (insert or update)."""
        ...

    def delete(self, entity: Entity) -> None:
        """Remove *entity*.  Deleting an unsaved entity is a no-op."""
        ...


from modelsync.persistence.memory import MemoryStore  # noqa: E402
from modelsync.persistence.sqlite_store import SQLiteStore  # noqa: E402

__all__ = ["Entity", "Persistence", "MemoryStore", "SQLiteStore"]
