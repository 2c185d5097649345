"""
Redis session store.

Redis expires keys on its own, so gc() has nothing to do.
"""

import logging
from typing import Optional

from .interfaces import NotFoundError, StoreOption

logger = logging.getLogger(__name__)


class RedisStore:
    """Session store backed by a redis.asyncio client."""

    def __init__(self, redis_client, prefix: str = "session:"):
        """
        Initialize redis store.

        Args:
            redis_client: Async Redis client
            prefix: Namespace prepended to every storage key
        """
        self.redis = redis_client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str, opt: Optional[StoreOption] = None) -> bytes:
        redis_key = self._key(key)
        if opt is not None and opt.extends_ttl:
            # GETEX reads and refreshes the expiry in one round trip
            data = await self.redis.getex(redis_key, px=int(opt.ttl * 1000))
        else:
            data = await self.redis.get(redis_key)
        if data is None:
            raise NotFoundError(key)

        # Clients created with decode_responses=True hand back str
        if isinstance(data, str):
            return data.encode("utf-8")
        return data

    async def set(self, key: str, value: bytes, ttl: float) -> None:
        if ttl > 0:
            await self.redis.set(self._key(key), value, px=int(ttl * 1000))
        else:
            await self.redis.set(self._key(key), value)

    async def touch(self, key: str, ttl: float) -> None:
        # Both commands are no-ops on a missing key
        if ttl > 0:
            await self.redis.pexpire(self._key(key), int(ttl * 1000))
        else:
            await self.redis.persist(self._key(key))

    async def delete(self, key: str) -> None:
        await self.redis.delete(self._key(key))

    async def gc(self) -> int:
        return 0
