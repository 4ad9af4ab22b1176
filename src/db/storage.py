# durable local key/value storage, the terminal counterpart of a browser's localStorage
import os.path
import sqlite3
from typing import Dict, Optional, Protocol

from utils.logger import get_logger

_logger = get_logger(__name__)


class StorageError(Exception):
    """Raised when the local storage cannot be read or written."""


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class LocalStorage:
    """
    Synchronous key/value store in a small sqlite file.

    Each call opens its own connection and commits before returning, so a
    write is a single blocking step with nothing interleaved.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _connect(self) -> sqlite3.Connection:
        folder = os.path.dirname(self.path)
        try:
            if folder:
                os.makedirs(folder, exist_ok=True)
            conn = sqlite3.connect(self.path)
            conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL);"
            )
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"cannot open local storage {self.path}: {e}") from e
        return conn

    def get(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?;", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"cannot read {key!r}: {e}") from e
        finally:
            conn.close()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    "INSERT INTO kv(key, value) VALUES(?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
                    (key, value),
                )
        except sqlite3.Error as e:
            raise StorageError(f"cannot write {key!r}: {e}") from e
        finally:
            conn.close()
        _logger.debug(f"Stored {len(value)} chars under {key!r}.")


class MemoryStorage:
    """In-process storage, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
