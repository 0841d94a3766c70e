"""Matcher — selects the bindings an envelope is routed to.

Matching is exact equality of normalized class and action names.  The
result keeps registration order; no binding is ever partially matched.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from modelsync.models.bindings import HandlerBinding
from modelsync.models.envelopes import SyncEnvelope

if TYPE_CHECKING:
    from modelsync.core.registry import Registry


def select(
    bindings: Iterable[HandlerBinding], class_name: object, action: object
) -> list[HandlerBinding]:
    """Return the bindings targeting (*class_name*, *action*), in order."""
    return [b for b in bindings if b.matches(class_name, action)]


def match(registry: Registry, envelope: SyncEnvelope) -> list[HandlerBinding]:
    """Return every binding in *registry* that *envelope* routes to."""
    return registry.lookup(envelope.class_name, envelope.action)
