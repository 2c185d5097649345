"""
Unit tests for the Redis store.
"""

import pytest

from sessionkit.modules.storage import NotFoundError, RedisStore, StoreOption


@pytest.fixture
def store(mock_redis):
    return RedisStore(mock_redis)


@pytest.mark.asyncio
async def test_set_with_ttl_uses_milliseconds(store, mock_redis):
    await store.set("abc", b"payload", 1.5)
    mock_redis.set.assert_called_once_with("session:abc", b"payload", px=1500)


@pytest.mark.asyncio
async def test_set_without_ttl_persists(store, mock_redis):
    await store.set("abc", b"payload", 0)
    mock_redis.set.assert_called_once_with("session:abc", b"payload")


@pytest.mark.asyncio
async def test_get_missing_raises_not_found(store, mock_redis):
    mock_redis.get.return_value = None

    with pytest.raises(NotFoundError):
        await store.get("abc")
    mock_redis.get.assert_called_once_with("session:abc")


@pytest.mark.asyncio
async def test_get_accepts_decoded_responses(store, mock_redis):
    """Clients with decode_responses=True return str."""
    mock_redis.get.return_value = '{"a":1}'
    assert await store.get("abc") == b'{"a":1}'


@pytest.mark.asyncio
async def test_rolling_get_refreshes_expiry(store, mock_redis):
    """Rolling reads use a single GETEX."""
    mock_redis.getex.return_value = b"payload"

    assert await store.get("abc", StoreOption(ttl=60, rolling=True)) == b"payload"

    mock_redis.getex.assert_called_once_with("session:abc", px=60000)
    mock_redis.get.assert_not_called()
    mock_redis.pexpire.assert_not_called()


@pytest.mark.asyncio
async def test_rolling_get_missing_raises_not_found(store, mock_redis):
    mock_redis.getex.return_value = None

    with pytest.raises(NotFoundError):
        await store.get("abc", StoreOption(ttl=60, rolling=True))


@pytest.mark.asyncio
async def test_plain_get_does_not_touch_expiry(store, mock_redis):
    mock_redis.get.return_value = b"payload"

    await store.get("abc", StoreOption(ttl=60))

    mock_redis.pexpire.assert_not_called()
    mock_redis.getex.assert_not_called()


@pytest.mark.asyncio
async def test_touch_sets_expiry(store, mock_redis):
    await store.touch("abc", 2.5)
    mock_redis.pexpire.assert_called_once_with("session:abc", 2500)


@pytest.mark.asyncio
async def test_touch_without_ttl_persists(store, mock_redis):
    await store.touch("abc", 0)
    mock_redis.persist.assert_called_once_with("session:abc")


@pytest.mark.asyncio
async def test_delete(store, mock_redis):
    await store.delete("abc")
    mock_redis.delete.assert_called_once_with("session:abc")


@pytest.mark.asyncio
async def test_gc_is_noop(store, mock_redis):
    assert await store.gc() == 0


@pytest.mark.asyncio
async def test_round_trip_with_data(mock_redis_with_data):
    store = RedisStore(mock_redis_with_data, prefix="app:")

    await store.set("abc", b"payload", 10)
    assert await store.get("abc") == b"payload"
    assert mock_redis_with_data._expiries["app:abc"] == 10000

    await store.get("abc", StoreOption(ttl=30, rolling=True))
    assert mock_redis_with_data._expiries["app:abc"] == 30000

    await store.delete("abc")
    await store.delete("abc")
    with pytest.raises(NotFoundError):
        await store.get("abc")
