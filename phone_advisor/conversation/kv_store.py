"""SQLite-backed key-value store used to mirror memory across restarts."""

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """Minimal JSON key-value store on top of a single SQLite table."""

    def __init__(self, db_path: str = "data/phone_advisor.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_db(self) -> None:
        with closing(self._get_connection()) as conn, conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
        logger.info("Key-value store initialized at %s", self.db_path)

    def get(self, key: str) -> Optional[Any]:
        """Return the decoded value for ``key`` or None if absent."""
        with closing(self._get_connection()) as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        """Insert or replace ``key`` with the JSON encoding of ``value``."""
        with closing(self._get_connection()) as conn, conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = excluded.updated_at
                """,
                (key, json.dumps(value, default=str)),
            )

    def delete(self, key: str) -> None:
        with closing(self._get_connection()) as conn, conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
