"""Store-backed entity handle."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from modelsync.models.entities import EntityType

if TYPE_CHECKING:
    from modelsync.persistence import Persistence


class Entity:
    """A single record of an ``EntityType``, bound to the store that owns it.

    The entity holds plain field values; ``save()`` and ``delete()`` hand
    the record back to its store.  Stores set ``store_key`` once the entity
    has been written.
    """

    def __init__(
        self,
        entity_type: EntityType,
        values: dict[str, Any],
        store: Persistence,
        *,
        store_key: Any = None,
    ) -> None:
        self.entity_type = entity_type
        self.values = values
        self.store_key = store_key
        self._store = store

    @property
    def type_name(self) -> str:
        return self.entity_type.name

    @property
    def id_value(self) -> Any:
        return self.values.get(self.entity_type.id_field)

    @property
    def is_new(self) -> bool:
        return self.store_key is None

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def assign(self, name: str, value: Any) -> None:
        """Set a field through the entity type's typed setter."""
        self.entity_type.setter(name)(self.values, value)

    def save(self) -> None:
        self._store.save(self)

    def delete(self) -> None:
        self._store.delete(self)

    def __repr__(self) -> str:
        return f"Entity({self.type_name}, {self.values!r})"
