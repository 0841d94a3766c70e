"""Shared test fixtures for modelsync."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from modelsync.bridge.transport import LocalTransport
from modelsync.core.context import SyncContext
from modelsync.core.dispatcher import Dispatcher
from modelsync.core.reconciler import Reconciler
from modelsync.core.registry import Registry
from modelsync.models.entities import EntityType
from modelsync.models.envelopes import SyncEnvelope
from modelsync.persistence import MemoryStore, SQLiteStore


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases."""
    return tmp_path


@pytest.fixture
def user_type() -> EntityType:
    """The subscriber-side user type used across tests."""
    return EntityType(
        name="SubscriberUser",
        field_types={"id": int, "name": str, "email": str, "age": int},
    )


@pytest.fixture
def sample_user_type() -> EntityType:
    """Entity type for the ``SampleUser`` scenario."""
    return EntityType(name="SampleUser", field_types={"id": int, "title": str})


@pytest.fixture
def store() -> MemoryStore:
    """Provide a fresh in-memory store."""
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_dir: Path) -> SQLiteStore:
    """Provide a fresh SQLiteStore backed by a temp database."""
    return SQLiteStore(tmp_dir / "entities.db")


@pytest.fixture
def registry() -> Registry:
    """Provide an empty, unfrozen registry."""
    return Registry()


@pytest.fixture
def dispatcher(registry: Registry, store: MemoryStore) -> Dispatcher:
    """Provide a Dispatcher wired to the test registry and store."""
    return Dispatcher(registry, Reconciler(store))


@pytest.fixture
def transport() -> LocalTransport:
    """Provide an in-memory LocalTransport on the default topic."""
    return LocalTransport("model-sync", max_local_queue=32)


@pytest.fixture
def context(store: MemoryStore, transport: LocalTransport) -> SyncContext:
    """Provide an unstarted SyncContext on in-memory backends."""
    return SyncContext(persistence=store, transport=transport)


# ---------------------------------------------------------------------------
# Envelope factory — shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_envelope() -> Callable[..., SyncEnvelope]:
    """Factory fixture: build a SyncEnvelope with sensible defaults."""

    def _factory(
        class_name: str = "SubscriberUser",
        action: str = "create",
        id: Any = 1,
        **overrides: Any,
    ) -> SyncEnvelope:
        defaults: dict[str, Any] = {
            "class_name": class_name,
            "action": action,
            "id": id,
            "payload": {"name": "Ada"},
        }
        defaults.update(overrides)
        return SyncEnvelope(**defaults)

    return _factory

