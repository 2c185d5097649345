"""
Shared pytest fixtures for sessionkit tests.

This module provides common fixtures including:
- FakeClock: Deterministic time source for expiry tests
- RecordingStore: In-memory store that records every call
- Redis mocks for the redis store
- FastAPI app builders for middleware tests
"""

import os
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessionkit.modules.middleware import SessionConfig, get_session, install_session_middleware
from sessionkit.modules.storage import MemoryStore, StoreOption

TEST_SECRET = b"test-secret"


# =============================================================================
# Time
# =============================================================================

class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Store Recording Infrastructure
# =============================================================================

@dataclass
class StoreCalls:
    """Record of store calls made during a test."""
    gets: List[str] = field(default_factory=list)
    sets: List[Tuple[str, bytes, float]] = field(default_factory=list)
    deletes: List[str] = field(default_factory=list)
    touches: List[Tuple[str, float]] = field(default_factory=list)

    def reset(self):
        self.gets.clear()
        self.sets.clear()
        self.deletes.clear()
        self.touches.clear()


class RecordingStore(MemoryStore):
    """
    MemoryStore that records every call.

    Usage:
        def test_something(recording_store):
            ... run requests ...
            assert len(recording_store.calls.sets) == 1
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = StoreCalls()

    async def get(self, key: str, opt: Optional[StoreOption] = None) -> bytes:
        self.calls.gets.append(key)
        return await super().get(key, opt)

    async def set(self, key: str, value: bytes, ttl: float) -> None:
        self.calls.sets.append((key, value, ttl))
        await super().set(key, value, ttl)

    async def touch(self, key: str, ttl: float) -> None:
        self.calls.touches.append((key, ttl))
        await super().touch(key, ttl)

    async def delete(self, key: str) -> None:
        self.calls.deletes.append(key)
        await super().delete(key)


@pytest.fixture
def recording_store():
    return RecordingStore()


class FailingStore(MemoryStore):
    """Store whose selected operations raise."""

    def __init__(self, fail_get: bool = False, fail_set: bool = False, fail_delete: bool = False):
        super().__init__()
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.fail_delete = fail_delete

    async def get(self, key, opt=None):
        if self.fail_get:
            raise ConnectionError("store unavailable")
        return await super().get(key, opt)

    async def set(self, key, value, ttl):
        if self.fail_set:
            raise ConnectionError("store unavailable")
        await super().set(key, value, ttl)

    async def delete(self, key):
        if self.fail_delete:
            raise ConnectionError("store unavailable")
        await super().delete(key)


# =============================================================================
# App Builders
# =============================================================================

def set_cookie_headers(response) -> List[str]:
    """All Set-Cookie headers on a TestClient response."""
    return response.headers.get_list("set-cookie")


def cookie_value(header: str) -> str:
    """Value part of a Set-Cookie header."""
    first = header.split(";", 1)[0]
    return first.split("=", 1)[1].strip('"')


def make_app(
    store,
    handler: Optional[Callable[[Request], Any]] = None,
    **config_kwargs,
) -> FastAPI:
    """
    Build a test app with session middleware and a single GET / endpoint.

    Args:
        store: Session store
        handler: Function called with the request; its return value becomes
            the plain text body. Defaults to setting test=1.
        **config_kwargs: Extra SessionConfig fields
    """
    config_kwargs.setdefault("secret", TEST_SECRET)
    config = SessionConfig(store=store, **config_kwargs)
    app = FastAPI()
    app.state.session_middleware = install_session_middleware(app, config)

    def default_handler(request: Request):
        get_session(request, config.name).set("test", 1)
        return "ok"

    handler = handler or default_handler

    @app.get("/")
    async def index(request: Request):
        return PlainTextResponse(str(handler(request)))

    return app


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis():
    """Create a mock Redis client for async operations."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.getex = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.pexpire = AsyncMock(return_value=True)
    redis.persist = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes.
    """
    storage = {}
    expiries = {}

    redis = AsyncMock()

    async def mock_set(key, value, px=None, **kwargs):
        storage[key] = value
        if px is not None:
            expiries[key] = px
        else:
            expiries.pop(key, None)
        return True

    async def mock_get(key):
        return storage.get(key)

    async def mock_getex(key, px=None):
        if key in storage and px is not None:
            expiries[key] = px
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                expiries.pop(key, None)
                count += 1
        return count

    async def mock_pexpire(key, ms):
        if key not in storage:
            return False
        expiries[key] = ms
        return True

    async def mock_persist(key):
        return expiries.pop(key, None) is not None

    redis.set = mock_set
    redis.get = mock_get
    redis.getex = mock_getex
    redis.delete = mock_delete
    redis.pexpire = mock_pexpire
    redis.persist = mock_persist
    redis._storage = storage  # Expose for test assertions
    redis._expiries = expiries

    return redis


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
