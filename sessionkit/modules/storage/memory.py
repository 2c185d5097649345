"""
In-memory session store.

Records live in a fixed number of shards, each behind its own lock, so
requests touching different keys rarely contend. Expiry is checked on
every read; the GC sweep only reclaims memory.
"""

import logging
import threading
import time
import zlib
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .gc import GCWorker
from .interfaces import NotFoundError, StoreOption

logger = logging.getLogger(__name__)


@dataclass
class _Record:
    value: bytes
    expires_at: Optional[float]  # None = never

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class _Shard:
    def __init__(self):
        self.lock = threading.Lock()
        self.records: Dict[str, _Record] = {}


class MemoryStore:
    """Sharded in-memory store. Data does not survive a restart."""

    def __init__(self, shards: int = 16, clock: Callable[[], float] = time.monotonic):
        """
        Initialize memory store.

        Args:
            shards: Number of independently locked partitions
            clock: Monotonic time source (injectable for tests)
        """
        if shards <= 0:
            raise ValueError("shards must be positive")
        self._shards: List[_Shard] = [_Shard() for _ in range(shards)]
        self._clock = clock

    def _shard(self, key: str) -> _Shard:
        return self._shards[zlib.crc32(key.encode("utf-8")) % len(self._shards)]

    def _expiry(self, ttl: float) -> Optional[float]:
        if ttl <= 0:
            return None
        return self._clock() + ttl

    async def get(self, key: str, opt: Optional[StoreOption] = None) -> bytes:
        shard = self._shard(key)
        now = self._clock()
        with shard.lock:
            record = shard.records.get(key)
            if record is None:
                raise NotFoundError(key)
            if record.expired(now):
                del shard.records[key]
                raise NotFoundError(key)
            if opt is not None and opt.extends_ttl:
                record.expires_at = now + opt.ttl
            return record.value

    async def set(self, key: str, value: bytes, ttl: float) -> None:
        shard = self._shard(key)
        record = _Record(value=bytes(value), expires_at=self._expiry(ttl))
        with shard.lock:
            shard.records[key] = record

    async def touch(self, key: str, ttl: float) -> None:
        shard = self._shard(key)
        now = self._clock()
        with shard.lock:
            record = shard.records.get(key)
            if record is None or record.expired(now):
                return
            record.expires_at = now + ttl if ttl > 0 else None

    async def delete(self, key: str) -> None:
        shard = self._shard(key)
        with shard.lock:
            shard.records.pop(key, None)

    async def gc(self) -> int:
        """Sweep shards one at a time; each lock is held for one shard only."""
        removed = 0
        for shard in self._shards:
            now = self._clock()
            with shard.lock:
                expired = [k for k, r in shard.records.items() if r.expired(now)]
                for k in expired:
                    del shard.records[k]
            removed += len(expired)
        return removed

    def gc_every(self, interval: float) -> GCWorker:
        """Start a background sweep every `interval` seconds."""
        return GCWorker(self, interval).start()

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.records)
        return total
