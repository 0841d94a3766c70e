"""Exception hierarchy for modelsync.

Every error raised by the library derives from ``ModelSyncError`` so callers
can catch the whole family at a transport boundary.  Per-handler failures
raised while processing a message never escape the dispatcher; they are
listed here so handlers and collaborators can raise something specific.
"""

from __future__ import annotations


class ModelSyncError(RuntimeError):
    """Base class for all modelsync errors."""


class RegistrationError(ModelSyncError):
    """Raised at startup when a publish/subscribe registration is invalid."""


class RegistryFrozenError(RegistrationError):
    """Raised when a binding is registered after message receipt started."""


class EnvelopeValidationError(ModelSyncError, ValueError):
    """Raised when an inbound message cannot be turned into an envelope."""


class CodecError(ModelSyncError):
    """Raised when a payload cannot be encoded or decoded."""


class TransportError(ModelSyncError):
    """Raised when a transport-level operation fails."""


class ReconciliationError(ModelSyncError):
    """Raised when an envelope cannot be reconciled into local state."""


class MissingIdentityError(ReconciliationError):
    """Raised when a reconciling envelope carries no identity value."""


class EntityValidationError(ReconciliationError):
    """Raised by a store when an entity fails validation on save."""


class ContextError(ModelSyncError):
    """Raised when the sync context is used out of its initialization order."""
