"""Dispatcher — runs every matched binding for an envelope, in isolation.

Each matched binding is invoked in registration order.  An exception raised
by one binding is logged with the envelope and binding, recorded in the
``DispatchReport``, and swallowed; the remaining bindings still run.
Nothing raised by a handler escapes ``dispatch()`` or ``process()``, so one
bad handler cannot turn a healthy message into a poison message.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from modelsync.core.matcher import match
from modelsync.core.reconciler import Reconciler
from modelsync.core.registry import Registry
from modelsync.models.bindings import BindingMode, HandlerBinding
from modelsync.models.envelopes import SyncEnvelope
from modelsync.models.reports import DispatchReport, HandlerOutcome

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes envelopes to their bindings.

    Usage
    -----
    >>> dispatcher = Dispatcher(registry, Reconciler(store))
    >>> report = dispatcher.process(envelope)
    >>> report.ok
    True
    """

    def __init__(self, registry: Registry, reconciler: Reconciler) -> None:
        self._registry = registry
        self._reconciler = reconciler

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def reconciler(self) -> Reconciler:
        return self._reconciler

    def process(self, envelope: SyncEnvelope) -> DispatchReport:
        """Match *envelope* against the registry and dispatch it."""
        logger.info("processing message ==> %s", envelope.log_context())
        bindings = match(self._registry, envelope)
        if not bindings:
            logger.debug(
                "No binding for %s.%s", envelope.class_name, envelope.action
            )
        report = self.dispatch(envelope, bindings)
        logger.info("processed message ==> %s", envelope.log_context())
        return report

    def dispatch(
        self, envelope: SyncEnvelope, bindings: Iterable[HandlerBinding]
    ) -> DispatchReport:
        """Invoke each binding once, in order, isolating failures."""
        outcomes: list[HandlerOutcome] = []
        for binding in bindings:
            try:
                self._invoke(envelope, binding)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Error listener (%s): %s ==> %s",
                    binding.describe(),
                    exc,
                    envelope.log_context(),
                )
                outcomes.append(HandlerOutcome.failure(binding, exc))
            else:
                outcomes.append(HandlerOutcome.success(binding))

        report = DispatchReport(envelope=envelope, outcomes=outcomes)
        if report.failed:
            logger.warning(
                "%s.%s: %d/%d handlers succeeded, %d failed",
                envelope.class_name,
                envelope.action,
                len(report.succeeded),
                report.matched,
                len(report.failed),
            )
        return report

    def _invoke(self, envelope: SyncEnvelope, binding: HandlerBinding) -> None:
        if binding.mode is BindingMode.DIRECT:
            binding.handler(dict(envelope.payload))
        else:
            self._reconciler.reconcile(envelope, binding)
