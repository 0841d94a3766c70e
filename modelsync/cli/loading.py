"""Resolve ``module:attribute`` references to a ``SyncContext``."""

from __future__ import annotations

import importlib

from modelsync.core.context import SyncContext
from modelsync.errors import ContextError


def load_context(reference: str) -> SyncContext:
    """Import *reference* (``package.module:attribute``) and return its context.

    The attribute may be a ``SyncContext`` or a zero-argument callable
    returning one.
    """
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ContextError(
            f"Expected 'module:attribute', got {reference!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ContextError(f"Cannot import {module_name!r}: {exc}") from exc

    try:
        target = getattr(module, attribute)
    except AttributeError:
        raise ContextError(f"{module_name} has no attribute {attribute!r}") from None

    context = target if isinstance(target, SyncContext) else None
    if context is None and callable(target):
        context = target()
    if not isinstance(context, SyncContext):
        raise ContextError(f"{reference} did not produce a SyncContext")
    return context
