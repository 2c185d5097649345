"""
Store Factory following Black Box Design principles.

This factory:
- Picks a store backend based on configuration
- Wires the backend's dependencies (redis client, sqlite path)
- Returns only the Store interface
"""

import logging
from typing import Any, Optional

from .interfaces import Store
from .memory import MemoryStore
from .redis_store import RedisStore
from .sql import SQLStore

logger = logging.getLogger(__name__)

BACKENDS = ("memory", "sql", "redis")


class StoreFactory:
    """Composition root for session stores."""

    @staticmethod
    def build(settings, redis_client: Optional[Any] = None) -> Store:
        """
        Build the configured store.

        Args:
            settings: StoreSettings (backend, sqlite_path, sqlite_table, ...)
            redis_client: Async Redis client, required for the redis backend

        Returns:
            Store implementation

        Raises:
            ValueError: On unknown backend or missing redis client
        """
        backend = settings.backend.lower()

        if backend == "memory":
            logger.info("Building in-memory session store")
            return MemoryStore()

        if backend == "sql":
            logger.info(f"Building SQLite session store at {settings.sqlite_path}")
            return SQLStore(settings.sqlite_path, table=settings.sqlite_table)

        if backend == "redis":
            if redis_client is None:
                raise ValueError("Redis session store requires a redis client")
            logger.info("Building Redis session store")
            return RedisStore(redis_client)

        raise ValueError(
            f"Unknown session store backend: {settings.backend!r}. "
            f"Available: {', '.join(BACKENDS)}"
        )
