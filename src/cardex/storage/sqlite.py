"""SQLite storage backend - zero-config persistent storage.

SQLite is perfect for:
- A single user on a single device
- Local development
- Collections of tens to thousands of sightings
- Zero configuration

Example:
    >>> from cardex.storage.sqlite import SQLiteStorage
    >>>
    >>> # Just pass a path - schema auto-creates!
    >>> storage = SQLiteStorage("cardex.db")
    >>> await storage.initialize()
    >>>
    >>> # Or use in-memory for testing
    >>> storage = SQLiteStorage(":memory:")
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cardex.core.exceptions import PersistenceError
from cardex.models.collection import CollectionEntry, CollectionStatus
from cardex.models.sighting import GeoLocation, Sighting

logger = logging.getLogger(__name__)


class SQLiteStorage:
    """SQLite storage backend with auto-schema creation.

    The two durable collections map to the ``sightings`` and
    ``collection_entries`` tables. ``commit_sighting`` writes both rows in
    one transaction.

    Args:
        path: Database file path, or ":memory:" for in-memory.
        timeout: Lock timeout in seconds (default 30).

    Example:
        >>> storage = SQLiteStorage("cardex.db")
        >>> await storage.initialize()  # Auto-creates tables
        >>> await storage.commit_sighting(sighting, entry)
    """

    # Schema version for migrations
    SCHEMA_VERSION = 1

    def __init__(
        self,
        path: str | Path = ":memory:",
        *,
        timeout: float = 30.0,
    ) -> None:
        self._path = str(path)
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None
        self._initialized = False

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        """Get a cursor with automatic commit/rollback."""
        if not self._conn:
            raise PersistenceError("Storage not initialized. Call initialize() first.")
        cursor = self._conn.cursor()
        try:
            yield cursor
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            logger.error(f"SQLite operation failed on {self._path}: {exc}")
            raise PersistenceError(f"SQLite operation failed: {exc}") from exc
        except Exception:
            self._conn.rollback()
            raise
        finally:
            cursor.close()

    async def initialize(self) -> None:
        """Open the database and auto-create the schema.

        Safe to call multiple times (idempotent).
        """
        if self._conn is not None:
            return
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(self._path, timeout=self._timeout)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot open {self._path}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row

        if self._path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")

        self._create_schema()
        self._initialized = True
        logger.info(f"SQLiteStorage initialized ({self._path})")

    def _create_schema(self) -> None:
        """Create tables and indexes."""
        with self._cursor() as cursor:
            # seq preserves insertion order for list_sightings
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sightings (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    user_id TEXT NOT NULL,
                    model_id TEXT NOT NULL,
                    photo_reference TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    location TEXT,  -- JSON
                    note TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS collection_entries (
                    user_id TEXT NOT NULL,
                    model_id TEXT NOT NULL,
                    status TEXT NOT NULL,
                    best_photo_reference TEXT NOT NULL,
                    first_spotted_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, model_id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS _cardex_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            cursor.execute(
                "INSERT OR REPLACE INTO _cardex_meta (key, value) VALUES ('schema_version', ?)",
                (str(self.SCHEMA_VERSION),),
            )

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_sightings_user_model ON sightings(user_id, model_id)"
            )

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
        self._initialized = False

    # --- Sighting Operations ---

    async def list_sightings(self) -> list[Sighting]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM sightings ORDER BY seq")
            return [self._row_to_sighting(row) for row in cursor.fetchall()]

    async def get_sighting(self, sighting_id: str) -> Sighting | None:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM sightings WHERE id = ?", (sighting_id,))
            row = cursor.fetchone()
            return self._row_to_sighting(row) if row else None

    # --- Collection Entry Operations ---

    async def list_entries(self) -> list[CollectionEntry]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM collection_entries ORDER BY rowid")
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    async def get_entry(self, user_id: str, model_id: str) -> CollectionEntry | None:
        with self._cursor() as cursor:
            cursor.execute(
                "SELECT * FROM collection_entries WHERE user_id = ? AND model_id = ?",
                (user_id, model_id),
            )
            row = cursor.fetchone()
            return self._row_to_entry(row) if row else None

    async def save_entry(self, entry: CollectionEntry) -> None:
        with self._cursor() as cursor:
            self._upsert_entry(cursor, entry)

    async def replace_entries(self, entries: list[CollectionEntry]) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM collection_entries")
            for entry in entries:
                self._upsert_entry(cursor, entry)

    # --- Combined Operations ---

    async def commit_sighting(self, sighting: Sighting, entry: CollectionEntry) -> None:
        """Insert the sighting and upsert its entry in one transaction."""
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO sightings (id, user_id, model_id, photo_reference, created_at, location, note)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                sighting.id,
                sighting.user_id,
                sighting.model_id,
                sighting.photo_reference,
                sighting.created_at.isoformat(),
                json.dumps(sighting.location.to_storage()) if sighting.location else None,
                sighting.note,
            ))
            self._upsert_entry(cursor, entry)

    # --- Helper Methods ---

    @staticmethod
    def _upsert_entry(cursor: sqlite3.Cursor, entry: CollectionEntry) -> None:
        cursor.execute("""
            INSERT INTO collection_entries (
                user_id, model_id, status, best_photo_reference, first_spotted_at
            ) VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id, model_id) DO UPDATE SET
                status = excluded.status,
                best_photo_reference = excluded.best_photo_reference,
                first_spotted_at = excluded.first_spotted_at
        """, (
            entry.user_id,
            entry.model_id,
            entry.status.value,
            entry.best_photo_reference,
            entry.first_spotted_at.isoformat(),
        ))

    def _row_to_sighting(self, row: sqlite3.Row) -> Sighting:
        """Convert a database row to Sighting."""
        try:
            return Sighting(
                id=row["id"],
                user_id=row["user_id"],
                model_id=row["model_id"],
                photo_reference=row["photo_reference"],
                created_at=datetime.fromisoformat(row["created_at"]),
                location=GeoLocation(**json.loads(row["location"])) if row["location"] else None,
                note=row["note"],
            )
        except (PydanticValidationError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Corrupt sighting row {row['id']!r} in {self._path}: {exc}") from exc

    def _row_to_entry(self, row: sqlite3.Row) -> CollectionEntry:
        """Convert a database row to CollectionEntry."""
        try:
            return CollectionEntry(
                user_id=row["user_id"],
                model_id=row["model_id"],
                status=CollectionStatus(row["status"]),
                best_photo_reference=row["best_photo_reference"],
                first_spotted_at=datetime.fromisoformat(row["first_spotted_at"]),
            )
        except (PydanticValidationError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Corrupt entry row in {self._path}: {exc}") from exc

    # --- Convenience Methods ---

    async def get_stats(self) -> dict[str, Any]:
        """Get storage statistics."""
        with self._cursor() as cursor:
            cursor.execute("SELECT COUNT(*) FROM sightings")
            sighting_count = cursor.fetchone()[0]

            cursor.execute("SELECT COUNT(*) FROM collection_entries")
            entry_count = cursor.fetchone()[0]

            return {
                "sightings": sighting_count,
                "entries": entry_count,
                "path": self._path,
            }
