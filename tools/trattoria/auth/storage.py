"""Durable key-value storage for the account registry and session record.

The host provides a ``KeyValueStore`` (the browser-style "local storage").
``DurableStoreAdapter`` wraps it so that no storage failure ever reaches the
caller:

    read(key)         -> (text | None, error | None)
    write(key, text)  -> bool
    remove(key)       -> bool

A missing key is not an error; ``read`` returns ``(None, None)``.
"""

from __future__ import annotations

import importlib
import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Tuple

session_tracker = importlib.import_module("session_tracker")
log_event = session_tracker.log_event

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = ".trattoria/storage.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class KeyValueStore(ABC):
    """Host-provided persistent text store.

    Implementations may raise from any method; callers go through
    ``DurableStoreAdapter`` which contains those failures.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text for ``key``, or None if absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``. Removing a missing key is not an error."""
        pass

    def close(self) -> None:
        pass


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Survives nothing, useful for tests and sandboxed hosts."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed store, one row per key.

    Args:
        db_path: Path to SQLite database file. Parent directories are created
                 automatically. Defaults to ".trattoria/storage.db".
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    def get_item(self, key: str) -> Optional[str]:
        row = self._conn.execute(
            "SELECT value FROM storage WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        self._conn.execute(
            "INSERT INTO storage (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )
        self._conn.commit()

    def remove_item(self, key: str) -> None:
        self._conn.execute("DELETE FROM storage WHERE key = ?", (key,))
        self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()


class DurableStoreAdapter:
    """Best-effort access to a ``KeyValueStore``. Never raises."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def read(self, key: str) -> Tuple[Optional[str], Optional[str]]:
        try:
            return self.store.get_item(key), None
        except Exception as e:
            logger.error(f"Error reading '{key}' from storage: {e}", exc_info=True)
            log_event("storage_error", operation="read", key=key, error=str(e))
            return None, str(e)

    def write(self, key: str, text: str) -> bool:
        try:
            self.store.set_item(key, text)
            return True
        except Exception as e:
            logger.error(f"Error saving '{key}' to storage: {e}", exc_info=True)
            log_event("storage_error", operation="write", key=key, error=str(e))
            return False

    def remove(self, key: str) -> bool:
        try:
            self.store.remove_item(key)
            return True
        except Exception as e:
            logger.error(f"Error removing '{key}' from storage: {e}", exc_info=True)
            log_event("storage_error", operation="remove", key=key, error=str(e))
            return False
