"""Key-value backends for the suggestion cache.

Two backends share one asynchronous interface:

- ``MemoryKeyValueStore`` keeps orjson-encoded values in a dict and is used
  for one-shot runs and tests.
- ``SQLiteKeyValueStore`` persists values in a single WAL-mode SQLite table
  so the cache survives process restarts. Blocking calls run in a worker
  thread through ``asyncio.to_thread``.

Values are anything orjson can encode (the cache stores dicts and strings).
Size accounting counts the UTF-8 key plus the encoded value, which is what
the byte quota of the cache is measured against.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import orjson

from anisuggest.config.models.cache_settings import CacheSettings
from anisuggest.shared.constants import CacheDefaults
from anisuggest.shared.errors import CacheError, ErrorCode, ErrorContext
from anisuggest.shared.logging import log_operation_success

logger = logging.getLogger(__name__)

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on old builds
_SQL_BATCH_SIZE = 500


@runtime_checkable
class KeyValueStore(Protocol):
    """Asynchronous key-value store with byte accounting."""

    async def get(self, keys: Iterable[str] | None = None) -> dict[str, Any]:
        """Return the stored values for ``keys`` (all values when None)."""
        ...

    async def set(self, items: Mapping[str, Any]) -> None:
        """Write all items in one atomic batch."""
        ...

    async def remove(self, keys: Iterable[str]) -> None: ...

    async def clear(self) -> None: ...

    async def bytes_in_use(self) -> int: ...

    async def close(self) -> None: ...


def _encode(key: str, value: Any) -> bytes:
    try:
        return orjson.dumps(value)
    except TypeError as e:
        raise CacheError(
            ErrorCode.CACHE_SERIALIZATION_ERROR,
            f"Cannot encode cache value for {key!r}: {e}",
            ErrorContext(operation="encode_value", additional_data={"key": key}),
            original_error=e,
        ) from e


def _entry_size(key: str, encoded: bytes) -> int:
    return len(key.encode("utf-8")) + len(encoded)


class MemoryKeyValueStore:
    """In-process key-value store.

    Example:
        >>> store = MemoryKeyValueStore()
        >>> await store.set({"input:bebop": "cowboy bebop"})
        >>> await store.get(["input:bebop"])
        {'input:bebop': 'cowboy bebop'}
    """

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def get(self, keys: Iterable[str] | None = None) -> dict[str, Any]:
        if keys is None:
            return {key: orjson.loads(raw) for key, raw in self._data.items()}
        return {key: orjson.loads(self._data[key]) for key in keys if key in self._data}

    async def set(self, items: Mapping[str, Any]) -> None:
        # Encode everything first so a bad value leaves the store untouched
        encoded = {key: _encode(key, value) for key, value in items.items()}
        self._data.update(encoded)

    async def remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def clear(self) -> None:
        self._data.clear()

    async def bytes_in_use(self) -> int:
        return sum(_entry_size(key, raw) for key, raw in self._data.items())

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._data)


class SQLiteKeyValueStore:
    """SQLite-backed key-value store.

    Uses WAL mode and a single ``kv`` table. Each public method runs its
    blocking work in a worker thread; a lock serializes access to the
    shared connection.

    Args:
        db_path: Path to the SQLite database file (created if missing)

    Raises:
        CacheError: If the database cannot be opened
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self.conn: sqlite3.Connection | None = None
        self._initialize_db()

    def _initialize_db(self) -> None:
        context = ErrorContext(
            operation="initialize_kv_db",
            additional_data={"db_path": str(self.db_path)},
        )
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,  # access is serialized by self._lock
                isolation_level=None,  # explicit transactions only
            )
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")
            self.conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value BLOB NOT NULL)"
            )
        except (sqlite3.Error, OSError) as e:
            raise CacheError(
                ErrorCode.CACHE_ERROR,
                f"Failed to open cache database: {e}",
                context,
                original_error=e,
            ) from e

        log_operation_success(
            logger=logger,
            operation="initialize_kv_db",
            duration_ms=0,
            context=context,
        )

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connection()
        conn.execute("BEGIN")
        try:
            yield conn
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise CacheError(
                ErrorCode.CACHE_ERROR,
                "Cache database is closed",
                ErrorContext(operation="kv_connection", additional_data={"db_path": str(self.db_path)}),
            )
        return self.conn

    def _run(self, operation: str, code: ErrorCode, func: Any, *args: Any) -> Any:
        with self._lock:
            try:
                return func(*args)
            except sqlite3.Error as e:
                raise CacheError(
                    code,
                    f"{operation} failed: {e}",
                    ErrorContext(operation=operation, additional_data={"db_path": str(self.db_path)}),
                    original_error=e,
                ) from e

    # Blocking implementations -------------------------------------------

    def _get_sync(self, keys: list[str] | None) -> dict[str, Any]:
        conn = self._connection()
        if keys is None:
            rows = conn.execute("SELECT key, value FROM kv").fetchall()
        else:
            rows = []
            for start in range(0, len(keys), _SQL_BATCH_SIZE):
                batch = keys[start : start + _SQL_BATCH_SIZE]
                placeholders = ",".join("?" * len(batch))
                rows.extend(
                    conn.execute(
                        f"SELECT key, value FROM kv WHERE key IN ({placeholders})",  # noqa: S608
                        batch,
                    ).fetchall()
                )

        result: dict[str, Any] = {}
        for key, raw in rows:
            try:
                result[key] = orjson.loads(raw)
            except orjson.JSONDecodeError:
                logger.warning("Skipping undecodable cache value for %r", key)
        return result

    def _set_sync(self, encoded: dict[str, bytes]) -> None:
        with self._transaction() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                list(encoded.items()),
            )

    def _remove_sync(self, keys: list[str]) -> None:
        with self._transaction() as conn:
            conn.executemany("DELETE FROM kv WHERE key = ?", [(key,) for key in keys])

    def _clear_sync(self) -> None:
        self._connection().execute("DELETE FROM kv")

    def _bytes_in_use_sync(self) -> int:
        row = self._connection().execute(
            "SELECT COALESCE(SUM(LENGTH(CAST(key AS BLOB)) + LENGTH(value)), 0) FROM kv"
        ).fetchone()
        return int(row[0])

    def _close_sync(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    # Async interface ------------------------------------------------------

    async def get(self, keys: Iterable[str] | None = None) -> dict[str, Any]:
        key_list = None if keys is None else list(keys)
        if key_list == []:
            return {}
        return await asyncio.to_thread(
            self._run, "kv_get", ErrorCode.CACHE_READ_FAILED, self._get_sync, key_list
        )

    async def set(self, items: Mapping[str, Any]) -> None:
        encoded = {key: _encode(key, value) for key, value in items.items()}
        if not encoded:
            return
        await asyncio.to_thread(
            self._run, "kv_set", ErrorCode.CACHE_WRITE_FAILED, self._set_sync, encoded
        )

    async def remove(self, keys: Iterable[str]) -> None:
        key_list = list(keys)
        if not key_list:
            return
        await asyncio.to_thread(
            self._run, "kv_remove", ErrorCode.CACHE_WRITE_FAILED, self._remove_sync, key_list
        )

    async def clear(self) -> None:
        await asyncio.to_thread(self._run, "kv_clear", ErrorCode.CACHE_WRITE_FAILED, self._clear_sync)

    async def bytes_in_use(self) -> int:
        return await asyncio.to_thread(
            self._run, "kv_bytes_in_use", ErrorCode.CACHE_READ_FAILED, self._bytes_in_use_sync
        )

    async def close(self) -> None:
        await asyncio.to_thread(self._run, "kv_close", ErrorCode.CACHE_ERROR, self._close_sync)


def create_store(settings: CacheSettings) -> KeyValueStore:
    """Create the key-value backend selected by the cache settings."""
    if settings.backend == CacheDefaults.BACKEND_MEMORY:
        logger.debug("Using in-memory suggestion cache")
        return MemoryKeyValueStore()
    logger.debug("Using SQLite suggestion cache at %s", settings.db_path)
    return SQLiteKeyValueStore(Path(settings.db_path).expanduser())


__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "create_store",
]
