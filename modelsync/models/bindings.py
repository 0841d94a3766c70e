"""Handler bindings and publish settings.

A ``HandlerBinding`` ties one wire (class, action) pair to one local
implementation.  Bindings are built by the registration API at startup and
carry their resolved implementation: a callable for direct bindings, an
``EntityType`` for reconciling bindings.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modelsync.models.entities import EntityType
from modelsync.models.envelopes import DEFAULT_ACTIONS, normalize_name


class BindingMode(str, Enum):
    """How a matched binding handles an envelope."""

    DIRECT = "direct"
    RECONCILING = "reconciling"


class HandlerBinding(BaseModel):
    """One registered subscription.

    ``target_class``/``target_action`` are what an inbound envelope must carry
    to match; ``impl_class``/``impl_action`` name the local implementation.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    target_class: str = Field(min_length=1)
    target_action: str = Field(min_length=1)
    mode: BindingMode
    impl_class: str
    impl_action: str
    identity_key: str | None = None
    allowed_attrs: frozenset[str] | None = None

    handler: Callable[[dict[str, Any]], Any] | None = Field(
        default=None, exclude=True, repr=False
    )
    entity_type: EntityType | None = Field(default=None, exclude=True, repr=False)

    @field_validator("target_class", "target_action", "impl_class", "impl_action", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        return normalize_name(value) if value is not None else value

    @model_validator(mode="after")
    def _implementation_bound(self) -> HandlerBinding:
        if self.mode is BindingMode.DIRECT and self.handler is None:
            raise ValueError("direct bindings need a handler callable")
        if self.mode is BindingMode.RECONCILING and self.entity_type is None:
            raise ValueError("reconciling bindings need an entity type")
        return self

    def matches(self, class_name: Any, action: Any) -> bool:
        return (
            self.target_class == normalize_name(class_name)
            and self.target_action == normalize_name(action)
        )

    def describe(self) -> str:
        return (
            f"{self.target_class}.{self.target_action} -> "
            f"{self.impl_class}.{self.impl_action} ({self.mode.value})"
        )


class PublishSettings(BaseModel):
    """How an entity type publishes its own mutations.

    ``attrs=None`` publishes every field.  ``id_accessor`` is either a field
    name or a callable taking the entity; ``None`` means the identity field.
    ``skip_if(entity, action)`` returning true suppresses a publish.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    attrs: frozenset[str] | None = None
    actions: tuple[str, ...] = DEFAULT_ACTIONS
    as_class: str | None = None
    id_accessor: str | Callable[[Any], Any] | None = None
    skip_if: Callable[[Any, str], bool] | None = None

    @field_validator("actions", mode="before")
    @classmethod
    def _normalize_actions(cls, value: Any) -> Any:
        if isinstance(value, (str, Enum)):
            value = [value]
        return tuple(normalize_name(action) for action in value)

    @field_validator("as_class", mode="before")
    @classmethod
    def _normalize_class(cls, value: Any) -> Any:
        return normalize_name(value) if value is not None else value

    def publishes(self, action: Any) -> bool:
        return normalize_name(action) in self.actions
