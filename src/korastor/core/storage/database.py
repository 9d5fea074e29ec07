"""SQLite backing file for the Korastor key-value state bank.

Opens the connection, applies pending schema migrations in order, and
tracks which version the file is on.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

# ---------------------------------------------------------------------------
# Migrations, keyed by the version they bring the file up to
# ---------------------------------------------------------------------------

_MIGRATIONS: dict[int, str] = {
    1: """
    -- One row per persisted blob (app state, health-system snapshots)
    CREATE TABLE IF NOT EXISTS kv_store (
        key        TEXT PRIMARY KEY,
        value      TEXT NOT NULL,
        updated_at TEXT NOT NULL DEFAULT (datetime('now'))
    );
    """,
}

SCHEMA_VERSION = max(_MIGRATIONS)

_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class DatabaseError(Exception):
    """The state database is unavailable or could not be opened."""


class StateDatabase:
    """Owns the single SQLite connection behind the state bank.

    ``":memory:"`` gives a throwaway database; anything else is treated as a
    file path (``~`` expanded, missing directories created).

    Usage::

        with StateDatabase("~/.korastor/state.db") as db:
            store = SQLiteKeyValueStore(db)
    """

    def __init__(self, db_path: str = MEMORY_PATH) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        """The open connection; raises DatabaseError before initialize()."""
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the connection and migrate. A no-op when already open."""
        if self.is_open:
            return

        target = self._db_path
        if target != MEMORY_PATH:
            db_file = Path(target).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_file)

        try:
            conn = sqlite3.connect(target, check_same_thread=False)
        except sqlite3.Error as exc:
            raise DatabaseError(f"Cannot open state database {self._db_path}: {exc}") from exc

        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        self._conn = conn

        self._migrate()
        logger.info("State database ready: %s (schema v%d)", self._db_path, SCHEMA_VERSION)

    def _migrate(self) -> None:
        conn = self.connection
        conn.executescript(_VERSION_TABLE)

        applied = self.get_schema_version()
        for version in sorted(v for v in _MIGRATIONS if v > applied):
            conn.executescript(_MIGRATIONS[version])
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (version,))
            conn.commit()
            logger.info("Applied state schema migration v%d", version)

    def get_schema_version(self) -> int:
        """Highest migration recorded in the file, 0 for a fresh one."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] or 0

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("State database closed: %s", self._db_path)

    def __enter__(self) -> StateDatabase:
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
