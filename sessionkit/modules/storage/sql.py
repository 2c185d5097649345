"""
SQLite session store.

A single table keyed by storage key, with the payload blob and a nullable
expiry timestamp. Blocking sqlite calls run in a worker thread so the
event loop is never held up by disk I/O.
"""

import asyncio
import logging
import re
import sqlite3
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from .gc import GCWorker
from .interfaces import NotFoundError, StoreOption

logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_INIT_SCHEMA = """
CREATE TABLE IF NOT EXISTS {table} (
    id TEXT PRIMARY KEY,
    value BLOB NOT NULL,
    created_at REAL NOT NULL,
    expires_at REAL
)
"""
_INIT_INDEX = "CREATE INDEX IF NOT EXISTS {table}_expires_at_idx ON {table} (expires_at)"

_SET = """
INSERT INTO {table} (id, value, created_at, expires_at)
VALUES (?, ?, ?, ?)
ON CONFLICT (id) DO UPDATE
SET value = excluded.value,
    expires_at = excluded.expires_at
"""
_GET = "SELECT value FROM {table} WHERE id = ? AND (expires_at IS NULL OR expires_at > ?)"
_TOUCH = "UPDATE {table} SET expires_at = ? WHERE id = ? AND (expires_at IS NULL OR expires_at > ?)"
_DEL = "DELETE FROM {table} WHERE id = ?"
_GC = "DELETE FROM {table} WHERE expires_at IS NOT NULL AND expires_at <= ?"


class SQLStore:
    """Relational session store backed by sqlite3."""

    def __init__(
        self,
        db_path: str = ":memory:",
        table: str = "sessions",
        init_schema: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize SQL store.

        Args:
            db_path: Path to SQLite database (":memory:" for a private in-process db)
            table: Table name
            init_schema: Create the table and index if missing
            clock: Wall-clock time source; expiry is stored as Unix time
        """
        if not _TABLE_NAME.match(table):
            raise ValueError(f"Invalid table name: {table!r}")

        self.db_path = db_path
        self.table = table
        self._clock = clock
        self._lock = threading.RLock()

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(
            db_path, check_same_thread=False, isolation_level=None  # Autocommit mode
        )
        if db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL")

        self.set_statement = _SET.format(table=table)
        self.get_statement = _GET.format(table=table)
        self.touch_statement = _TOUCH.format(table=table)
        self.del_statement = _DEL.format(table=table)
        self.gc_statement = _GC.format(table=table)

        if init_schema:
            self._init_schema()

    def _init_schema(self) -> None:
        try:
            with self._lock:
                self._conn.execute(_INIT_SCHEMA.format(table=self.table))
                self._conn.execute(_INIT_INDEX.format(table=self.table))
            logger.info(f"Session table '{self.table}' ready at {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize session schema: {e}")
            raise

    def _get(self, key: str, opt: Optional[StoreOption]) -> bytes:
        now = self._clock()
        with self._lock:
            row = self._conn.execute(self.get_statement, (key, now)).fetchone()
            if row is None:
                raise NotFoundError(key)
            if opt is not None and opt.extends_ttl:
                self._conn.execute(self.touch_statement, (now + opt.ttl, key, now))
        return bytes(row[0])

    def _set(self, key: str, value: bytes, ttl: float) -> None:
        now = self._clock()
        expires_at = now + ttl if ttl > 0 else None
        with self._lock:
            self._conn.execute(self.set_statement, (key, sqlite3.Binary(value), now, expires_at))

    def _touch(self, key: str, ttl: float) -> None:
        now = self._clock()
        expires_at = now + ttl if ttl > 0 else None
        with self._lock:
            self._conn.execute(self.touch_statement, (expires_at, key, now))

    def _delete(self, key: str) -> None:
        with self._lock:
            self._conn.execute(self.del_statement, (key,))

    def _gc(self) -> int:
        with self._lock:
            cursor = self._conn.execute(self.gc_statement, (self._clock(),))
            return cursor.rowcount

    async def get(self, key: str, opt: Optional[StoreOption] = None) -> bytes:
        return await asyncio.to_thread(self._get, key, opt)

    async def set(self, key: str, value: bytes, ttl: float) -> None:
        await asyncio.to_thread(self._set, key, value, ttl)

    async def touch(self, key: str, ttl: float) -> None:
        await asyncio.to_thread(self._touch, key, ttl)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    async def gc(self) -> int:
        return await asyncio.to_thread(self._gc)

    def gc_every(self, interval: float) -> GCWorker:
        """Start a background sweep every `interval` seconds."""
        return GCWorker(self, interval).start()

    def close(self) -> None:
        with self._lock:
            self._conn.close()
