"""Key-value store implementations.

``SQLiteKeyValueStore`` is the on-device store; ``InMemoryKeyValueStore``
backs tests and ephemeral servers and can be told to fail on purpose.
"""

from __future__ import annotations

import logging
import sqlite3

from korastor.core.storage import StorageError
from korastor.core.storage.database import DatabaseError, StateDatabase

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """KeyValueStore over the ``kv_store`` table of a StateDatabase.

    Usage::

        db = StateDatabase("~/.korastor/state.db")
        db.initialize()
        store = SQLiteKeyValueStore(db)
        await store.set("korastor_app_state", blob)
    """

    def __init__(self, database: StateDatabase) -> None:
        self._db = database

    async def get(self, key: str) -> str | None:
        try:
            row = self._db.connection.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except (sqlite3.Error, DatabaseError) as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        return row["value"] if row is not None else None

    async def set(self, key: str, value: str) -> None:
        try:
            conn = self._db.connection
            conn.execute(
                """INSERT INTO kv_store (key, value, updated_at)
                   VALUES (?, ?, datetime('now'))
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = excluded.updated_at""",
                (key, value),
            )
            conn.commit()
        except (sqlite3.Error, DatabaseError) as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc
        logger.debug("Stored %d chars under %s", len(value), key)

    async def delete(self, key: str) -> bool:
        try:
            conn = self._db.connection
            cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            conn.commit()
        except (sqlite3.Error, DatabaseError) as exc:
            raise StorageError(f"Failed to delete {key!r}: {exc}") from exc
        return cursor.rowcount > 0


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore.

    Set ``fail_reads`` / ``fail_writes`` to simulate a broken device store.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False
        self.write_count = 0

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageError(f"Simulated read failure for {key!r}")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Simulated write failure for {key!r}")
        self.data[key] = value
        self.write_count += 1

    async def delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None
