"""Entity type schemas.

An ``EntityType`` describes a locally persisted record type: its name, its
typed fields, and its primary identifier field.  The setter table used to
merge inbound attributes is built once when the type is declared, so no
attribute name is resolved reflectively while a message is being processed.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr, TypeAdapter, ValidationError

from modelsync.errors import EntityValidationError

Setter = Callable[[dict[str, Any], Any], None]


class EntityType(BaseModel):
    """Schema of a persisted entity type.

    Examples
    --------
    >>> users = EntityType(name="User", field_types={"id": int, "name": str})
    >>> values = users.blank()
    >>> users.setter("id")(values, "7")
    >>> values["id"]
    7
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    field_types: dict[str, Any]
    id_field: str = "id"
    required: frozenset[str] = frozenset()

    _setters: dict[str, Setter] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        if self.id_field not in self.field_types:
            raise ValueError(
                f"Entity type {self.name!r} has no identifier field {self.id_field!r}"
            )
        unknown = self.required - set(self.field_types)
        if unknown:
            raise ValueError(
                f"Entity type {self.name!r} requires unknown fields {sorted(unknown)}"
            )
        for field_name, annotation in self.field_types.items():
            self._setters[field_name] = _make_setter(
                self.name, field_name, TypeAdapter(annotation)
            )

    def __str__(self) -> str:
        return self.name

    @property
    def field_names(self) -> frozenset[str]:
        return frozenset(self.field_types)

    def has_field(self, name: str) -> bool:
        return name in self.field_types

    def setter(self, name: str) -> Setter:
        """Return the typed setter for *name*.

        Raises
        ------
        EntityValidationError
            If *name* is not a field of this type.
        """
        try:
            return self._setters[name]
        except KeyError:
            raise EntityValidationError(
                f"{self.name} has no attribute {name!r}"
            ) from None

    def coerce(self, name: str, value: Any) -> Any:
        """Convert *value* the way assigning it to *name* would."""
        scratch: dict[str, Any] = {}
        self.setter(name)(scratch, value)
        return scratch[name]

    def blank(self) -> dict[str, Any]:
        """Field values of a freshly constructed entity (all ``None``)."""
        return {name: None for name in self.field_types}

    def validate_values(self, values: Mapping[str, Any]) -> None:
        """Check that every required field carries a value."""
        missing = sorted(name for name in self.required if values.get(name) is None)
        if missing:
            raise EntityValidationError(
                f"{self.name} is missing required fields: {', '.join(missing)}"
            )


def _make_setter(type_name: str, field_name: str, adapter: TypeAdapter) -> Setter:
    def _set(values: dict[str, Any], value: Any) -> None:
        if value is None:
            values[field_name] = None
            return
        try:
            values[field_name] = adapter.validate_python(value)
        except ValidationError as exc:
            raise EntityValidationError(
                f"{type_name}.{field_name}: invalid value {value!r}"
            ) from exc

    return _set
