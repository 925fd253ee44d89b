"""Namespaced key-value snapshot stores backing the project archive."""

import logging
import shutil
import sqlite3
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from config.exceptions import PersistenceCapacityExceededError, PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 5 * 1024 * 1024

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS snapshots (
    namespace_key TEXT PRIMARY KEY,
    snapshot TEXT NOT NULL,
    size_bytes INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Key-value capability storing one serialized snapshot per key."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, snapshot: str) -> None:
        """Store ``snapshot`` under ``key``.

        Raises:
            PersistenceCapacityExceededError: Snapshot is larger than the store allows.
            PersistenceError: Any other write failure.
        """
        ...

    def delete(self, key: str) -> None:
        ...


def _check_capacity(key: str, snapshot: str, max_bytes: int) -> int:
    size = len(snapshot.encode("utf-8"))
    if size > max_bytes:
        raise PersistenceCapacityExceededError(key, size, max_bytes)
    return size


class MemorySnapshotStore:
    """In-process snapshot store with the same capacity rules as SQLite."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES):
        self.max_bytes = max_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, snapshot: str) -> None:
        _check_capacity(key, snapshot, self.max_bytes)
        self._data[key] = snapshot

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqliteSnapshotStore:
    """SQLite-backed snapshot store."""

    def __init__(self, db_path: str | Path, max_bytes: int = DEFAULT_MAX_BYTES):
        self.db_path = Path(db_path)
        self.max_bytes = max_bytes
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    def _init_db(self):
        with self._get_conn() as conn:
            conn.executescript(_CREATE_TABLES_SQL)

    def backup_database(self, target_path: str | Path) -> Path:
        """Create a backup copy of the database.

        Args:
            target_path: Path for the backup file.

        Returns:
            Path to the backup file.
        """
        target = Path(target_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        conn = self._get_conn()
        try:
            conn.execute("PRAGMA wal_checkpoint(FULL)")
        finally:
            conn.close()
        shutil.copy2(str(self.db_path), str(target))
        logger.info("Snapshot database backed up to %s", target)
        return target

    def get(self, key: str) -> Optional[str]:
        try:
            with self._get_conn() as conn:
                row = conn.execute(
                    "SELECT snapshot FROM snapshots WHERE namespace_key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read snapshot: {e}", {"key": key}) from e
        return row["snapshot"] if row else None

    def set(self, key: str, snapshot: str) -> None:
        size = _check_capacity(key, snapshot, self.max_bytes)
        try:
            with self._get_conn() as conn:
                conn.execute(
                    "INSERT INTO snapshots (namespace_key, snapshot, size_bytes) VALUES (?, ?, ?) "
                    "ON CONFLICT(namespace_key) DO UPDATE SET snapshot=excluded.snapshot, "
                    "size_bytes=excluded.size_bytes, updated_at=CURRENT_TIMESTAMP",
                    (key, snapshot, size),
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to write snapshot: {e}", {"key": key}) from e
        logger.debug("Snapshot '%s' written (%d bytes)", key, size)

    def delete(self, key: str) -> None:
        try:
            with self._get_conn() as conn:
                conn.execute("DELETE FROM snapshots WHERE namespace_key = ?", (key,))
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to delete snapshot: {e}", {"key": key}) from e

    def keys(self) -> list[str]:
        with self._get_conn() as conn:
            rows = conn.execute("SELECT namespace_key FROM snapshots ORDER BY namespace_key").fetchall()
        return [r["namespace_key"] for r in rows]
