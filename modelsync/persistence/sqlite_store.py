"""SQLite-backed entity store.

Layout: one ``entities`` table holding every entity type.  Field values are
stored as a JSON document per row and looked up with ``json_extract``, so
entity types need no DDL of their own.  WAL journal mode allows concurrent
readers while one worker writes.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from modelsync.models.entities import EntityType
from modelsync.persistence.entity import Entity

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_ENTITIES = """
CREATE TABLE IF NOT EXISTS entities (
    row_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    entity_type  TEXT NOT NULL,
    data_json    TEXT NOT NULL,
    updated_at   TEXT DEFAULT (datetime('now'))
);
"""

_CREATE_IDX_TYPE = """
CREATE INDEX IF NOT EXISTS idx_entity_type ON entities(entity_type, row_id);
"""


class SQLiteStore:
    """Durable entity store.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Created if it does not exist.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_ENTITIES)
            conn.execute(_CREATE_IDX_TYPE)
            conn.commit()

    # ------------------------------------------------------------------
    # Persistence capability
    # ------------------------------------------------------------------

    def find(self, entity_type: EntityType, key: str, value: Any) -> Entity | None:
        if value is None or not entity_type.has_field(key):
            return None
        with self._connect() as conn:
            row = conn.execute(
                "SELECT row_id, data_json FROM entities "
                "WHERE entity_type = ? AND json_extract(data_json, ?) = ? "
                "ORDER BY row_id LIMIT 1",
                (entity_type.name, f"$.{key}", value),
            ).fetchone()
        if row is None:
            return None
        row_id, data_json = row
        values = entity_type.blank()
        values.update(json.loads(data_json))
        return Entity(entity_type, values, self, store_key=row_id)

    def create(self, entity_type: EntityType, seed: Mapping[str, Any]) -> Entity:
        entity = Entity(entity_type, entity_type.blank(), self)
        for name, value in seed.items():
            entity.assign(name, value)
        return entity

    def save(self, entity: Entity) -> None:
        entity.entity_type.validate_values(entity.values)
        with self._connect() as conn:
            if entity.store_key is None:
                cursor = conn.execute(
                    "INSERT INTO entities (entity_type, data_json) VALUES (?, ?)",
                    (entity.type_name, json.dumps(entity.values)),
                )
                entity.store_key = cursor.lastrowid
                if entity.id_value is None:
                    entity.values[entity.entity_type.id_field] = entity.store_key
                    conn.execute(
                        "UPDATE entities SET data_json = ? WHERE row_id = ?",
                        (json.dumps(entity.values), entity.store_key),
                    )
            else:
                conn.execute(
                    "UPDATE entities SET data_json = ?, updated_at = datetime('now') "
                    "WHERE row_id = ?",
                    (json.dumps(entity.values), entity.store_key),
                )
            conn.commit()
        logger.debug("SQLiteStore: saved %s (row_id=%s)", entity, entity.store_key)

    def delete(self, entity: Entity) -> None:
        if entity.store_key is None:
            return
        with self._connect() as conn:
            conn.execute("DELETE FROM entities WHERE row_id = ?", (entity.store_key,))
            conn.commit()
        logger.debug("SQLiteStore: deleted %s (row_id=%s)", entity, entity.store_key)
        entity.store_key = None

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def all(self, entity_type: EntityType) -> list[Entity]:
        """Return every stored entity of *entity_type*, in insertion order."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT row_id, data_json FROM entities WHERE entity_type = ? "
                "ORDER BY row_id",
                (entity_type.name,),
            ).fetchall()
        entities = []
        for row_id, data_json in rows:
            values = entity_type.blank()
            values.update(json.loads(data_json))
            entities.append(Entity(entity_type, values, self, store_key=row_id))
        return entities

    def count(self, entity_type: EntityType) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM entities WHERE entity_type = ?",
                (entity_type.name,),
            ).fetchone()
        return row[0] if row else 0
