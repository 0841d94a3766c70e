"""Sync envelopes — the canonical change-event record.

Every message that crosses the transport is one ``SyncEnvelope``: the entity
class it concerns, the action, an optional identity value, the optional set of
attribute names it carries, and the payload itself.  The envelope is
self-describing; a receiver needs no side-channel schema to route it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from modelsync.errors import EnvelopeValidationError

# Attribute marking a message as produced by modelsync.  Receivers ignore
# anything on the topic that does not carry it.
MANAGED_FLAG = "service_model_sync"


class SyncAction(str, Enum):
    """The built-in CRUD actions.  Any other non-empty string is a custom action."""

    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"


DEFAULT_ACTIONS: tuple[str, ...] = (
    SyncAction.CREATE.value,
    SyncAction.UPDATE.value,
    SyncAction.DESTROY.value,
)


def normalize_name(value: Any) -> str:
    """Collapse enum members, classes and strings to one comparable string.

    >>> normalize_name(SyncAction.CREATE)
    'create'
    >>> normalize_name(int)
    'int'
    """
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, type):
        return value.__name__
    return str(value)


def project_attrs(
    values: Mapping[str, Any], allowed: Iterable[str] | None
) -> dict[str, Any]:
    """Return only the entries of *values* named in *allowed*.

    ``allowed=None`` keeps everything.  Names in *allowed* that are missing
    from *values* are simply absent from the result.
    """
    if allowed is None:
        return dict(values)
    return {name: values[name] for name in sorted(allowed) if name in values}


class SyncEnvelope(BaseModel):
    """A single change-event, inbound or outbound."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    class_name: str = Field(alias="class", min_length=1)
    action: str = Field(min_length=1)
    id: int | str | None = None
    attrs: frozenset[str] | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    @field_validator("class_name", "action", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> Any:
        if value is None:
            return value
        return normalize_name(value)

    @model_validator(mode="after")
    def _payload_required(self) -> SyncEnvelope:
        if not self.payload and not self.is_destroy:
            raise ValueError(
                f"payload may only be empty for {SyncAction.DESTROY.value!r}, "
                f"got action {self.action!r}"
            )
        return self

    @property
    def is_destroy(self) -> bool:
        return self.action == SyncAction.DESTROY.value

    # ------------------------------------------------------------------
    # Wire form
    # ------------------------------------------------------------------

    def to_attributes(self) -> dict[str, Any]:
        """Message attributes that accompany the encoded payload."""
        return {
            "class": self.class_name,
            "action": self.action,
            "id": self.id,
            "attrs": sorted(self.attrs) if self.attrs is not None else None,
            MANAGED_FLAG: True,
        }

    @classmethod
    def from_message(
        cls, payload: Any, attributes: Mapping[str, Any]
    ) -> SyncEnvelope:
        """Build an envelope from a decoded payload and its message attributes.

        Raises
        ------
        EnvelopeValidationError
            If the payload is not a mapping or the attributes do not describe
            a valid envelope.
        """
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise EnvelopeValidationError(
                f"Payload must be a JSON object, got {type(payload).__name__}"
            )
        try:
            return cls.model_validate(
                {
                    "class": attributes.get("class"),
                    "action": attributes.get("action"),
                    "id": attributes.get("id"),
                    "attrs": attributes.get("attrs"),
                    "payload": dict(payload),
                }
            )
        except ValidationError as exc:
            raise EnvelopeValidationError(
                f"Envelope validation failed: {exc}"
            ) from exc

    def log_context(self) -> str:
        return f"{self.payload!r}, {self.to_attributes()!r}"
