"""modelsync data models — all Pydantic v2, all frozen (immutable)."""

from modelsync.models.bindings import BindingMode, HandlerBinding, PublishSettings
from modelsync.models.entities import EntityType
from modelsync.models.envelopes import (
    DEFAULT_ACTIONS,
    MANAGED_FLAG,
    SyncAction,
    SyncEnvelope,
    normalize_name,
    project_attrs,
)
from modelsync.models.reports import DispatchReport, HandlerOutcome

__all__ = [
    # envelopes
    "SyncAction",
    "SyncEnvelope",
    "DEFAULT_ACTIONS",
    "MANAGED_FLAG",
    "normalize_name",
    "project_attrs",
    # entities
    "EntityType",
    # bindings
    "BindingMode",
    "HandlerBinding",
    "PublishSettings",
    # reports
    "HandlerOutcome",
    "DispatchReport",
]
