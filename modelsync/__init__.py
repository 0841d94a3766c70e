"""modelsync: entity-state synchronization over pub/sub.

Local entity mutations are published as self-describing change envelopes
(class, action, identity, payload).  Receiving services route each envelope
to every matching handler binding: direct handlers get the payload,
reconciling bindings upsert or delete a local entity from the allow-listed
attributes.  A failing handler never blocks its siblings.
"""

__version__ = "0.1.0"
__description__ = "Entity-state synchronization over pub/sub with isolated handler dispatch"

from modelsync.core.context import SyncContext
from modelsync.core.dispatcher import Dispatcher
from modelsync.core.emitter import build_envelope
from modelsync.core.matcher import match
from modelsync.core.reconciler import Reconciler
from modelsync.core.registry import Registry
from modelsync.models import (
    BindingMode,
    DispatchReport,
    EntityType,
    HandlerBinding,
    PublishSettings,
    SyncAction,
    SyncEnvelope,
)

__all__ = [
    "SyncContext",
    "Registry",
    "Dispatcher",
    "Reconciler",
    "match",
    "build_envelope",
    "BindingMode",
    "DispatchReport",
    "EntityType",
    "HandlerBinding",
    "PublishSettings",
    "SyncAction",
    "SyncEnvelope",
    "__version__",
]
