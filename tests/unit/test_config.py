"""Tests for process settings — env-driven via MODELSYNC_ variables."""

from __future__ import annotations

from pathlib import Path

from modelsync.config import SyncSettings


class TestSyncSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("MODELSYNC_TOPIC_NAME", raising=False)
        config = SyncSettings()
        assert config.environment == "development"
        assert config.log_level == "INFO"
        assert config.topic_name == "model-sync"
        assert config.max_local_queue == 1024

    def test_debug_off_by_default(self):
        assert SyncSettings().debug is False

    def test_debug_from_env(self, monkeypatch):
        monkeypatch.setenv("MODELSYNC_DEBUG", "true")
        assert SyncSettings().debug is True

    def test_default_paths(self):
        config = SyncSettings()
        assert config.queue_db_path == Path(".modelsync/queue.db")
        assert config.store_db_path == Path(".modelsync/entities.db")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MODELSYNC_TOPIC_NAME", "orders-sync")
        monkeypatch.setenv("MODELSYNC_MAX_LOCAL_QUEUE", "7")
        config = SyncSettings()
        assert config.topic_name == "orders-sync"
        assert config.max_local_queue == 7
