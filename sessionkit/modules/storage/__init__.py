"""
Storage Module - Black Box Interface

Purpose: Persist encoded session payloads with a time-to-live
Interface: get(), set(), delete(), gc()
Hidden: Backend specifics, locking, expiry bookkeeping

Any backend (memory, sqlite, redis) can be swapped in without affecting
other modules.
"""

from .factory import StoreFactory
from .gc import GCWorker
from .interfaces import NotFoundError, Store, StoreOption
from .memory import MemoryStore
from .redis_store import RedisStore
from .sql import SQLStore

__all__ = [
    "Store",
    "StoreOption",
    "NotFoundError",
    "MemoryStore",
    "SQLStore",
    "RedisStore",
    "GCWorker",
    "StoreFactory",
]
