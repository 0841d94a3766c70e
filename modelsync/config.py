"""Process configuration — env-driven via pydantic-settings.

Reads from a ``.env`` file and ``MODELSYNC_*`` environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncSettings(BaseSettings):
    """Settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export MODELSYNC_TOPIC_NAME=orders-sync
        export MODELSYNC_LOG_LEVEL=DEBUG
        export MODELSYNC_QUEUE_DB_PATH=/data/queue.db

    Or via .env file::

        MODELSYNC_ENVIRONMENT=production
        MODELSYNC_STORE_DB_PATH=/data/entities.db
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MODELSYNC_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    # Forces DEBUG logging regardless of log_level.
    debug: bool = False

    # Messaging
    topic_name: str = "model-sync"
    max_local_queue: int = 1024
    drain_batch_size: int = 100

    # Storage paths
    queue_db_path: Path | None = Path(".modelsync/queue.db")
    store_db_path: Path | None = Path(".modelsync/entities.db")


# Module-level singleton — import as `from modelsync.config import settings`
settings = SyncSettings()
