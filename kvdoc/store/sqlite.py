"""
SQLite storage backend.

Uses the stdlib sqlite3 driver synchronously; every write commits.
WAL mode enabled for concurrent read support.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from kvdoc.core.errors import StorageError
from kvdoc.store.base import KeyValueStore

logger = logging.getLogger(__name__)


class SQLiteStorage(KeyValueStore):
    """
    SQLite-based key/value storage.

    Keys enumerate in lexical order.

    Usage:
        storage = SQLiteStorage("~/.kvdoc/store.db")

        storage.set("orders", '{"identity": 1, "ids": []}')
        value = storage.get("orders")
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db: sqlite3.Connection | None = None

    @property
    def path(self) -> Path:
        return self._db_path

    def initialize(self) -> None:
        """Open the database and create the kv table."""
        # Ensure directory exists
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self._db = sqlite3.connect(str(self._db_path))

            self._db.execute("PRAGMA journal_mode=WAL")
            self._db.execute("PRAGMA synchronous=NORMAL")

            self._db.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    created_at REAL NOT NULL DEFAULT (strftime('%s', 'now')),
                    updated_at REAL NOT NULL DEFAULT (strftime('%s', 'now'))
                )
                """
            )
            self._db.commit()
            logger.debug(f"SQLite storage initialized at {self._db_path}")

        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize SQLite at {self._db_path}: {e}") from e

    def _ensure_db(self) -> sqlite3.Connection:
        """Ensure database is initialized."""
        if self._db is None:
            self.initialize()
        return self._db  # type: ignore[return-value]

    def get(self, key: str) -> str | None:
        db = self._ensure_db()
        try:
            row = db.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get key '{key}': {e}") from e

    def set(self, key: str, value: str) -> None:
        db = self._ensure_db()
        try:
            db.execute(
                """
                INSERT INTO kv (key, value, updated_at) VALUES (?, ?, strftime('%s', 'now'))
                ON CONFLICT(key) DO UPDATE SET value = ?, updated_at = strftime('%s', 'now')
                """,
                (key, value, value),
            )
            db.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to set key '{key}': {e}") from e

    def remove(self, key: str) -> None:
        db = self._ensure_db()
        try:
            db.execute("DELETE FROM kv WHERE key = ?", (key,))
            db.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove key '{key}': {e}") from e

    @property
    def length(self) -> int:
        db = self._ensure_db()
        try:
            return db.execute("SELECT COUNT(*) FROM kv").fetchone()[0]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to count keys: {e}") from e

    def key(self, index: int) -> str | None:
        if index < 0:
            return None
        db = self._ensure_db()
        try:
            row = db.execute(
                "SELECT key FROM kv ORDER BY key LIMIT 1 OFFSET ?", (index,)
            ).fetchone()
            return row[0] if row else None
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read key at {index}: {e}") from e

    def keys(self) -> Iterator[str]:
        db = self._ensure_db()
        try:
            rows = db.execute("SELECT key FROM kv ORDER BY key").fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list keys: {e}") from e
        return iter([row[0] for row in rows])

    def clear(self) -> None:
        db = self._ensure_db()
        try:
            db.execute("DELETE FROM kv")
            db.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to clear storage: {e}") from e

    def close(self) -> None:
        if self._db:
            self._db.close()
            self._db = None

    def __repr__(self) -> str:
        return f"SQLiteStorage({str(self._db_path)!r})"
