"""Dispatch outcome records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from modelsync.models.bindings import HandlerBinding
from modelsync.models.envelopes import SyncEnvelope


class HandlerOutcome(BaseModel):
    """Result of invoking one matched binding."""

    model_config = ConfigDict(frozen=True)

    binding: str
    succeeded: bool
    error: str = ""
    error_type: str = ""

    @classmethod
    def success(cls, binding: HandlerBinding) -> HandlerOutcome:
        return cls(binding=binding.describe(), succeeded=True)

    @classmethod
    def failure(cls, binding: HandlerBinding, exc: Exception) -> HandlerOutcome:
        return cls(
            binding=binding.describe(),
            succeeded=False,
            error=str(exc),
            error_type=type(exc).__name__,
        )


class DispatchReport(BaseModel):
    """Everything that happened while one envelope was processed."""

    model_config = ConfigDict(frozen=True)

    envelope: SyncEnvelope
    outcomes: list[HandlerOutcome] = []

    @property
    def matched(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> list[HandlerOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> list[HandlerOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def ok(self) -> bool:
        return not self.failed
