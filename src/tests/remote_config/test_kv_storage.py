"""Unit tests for key-value storage backends."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from qualitygate.config.admin_config import StorageConfig
from qualitygate.exceptions import ConfigurationError, StorageError
from qualitygate.remote_config.kv_storage import (
    MemoryStorage,
    RedisStorage,
    create_kv_storage,
)


def storage_config(**overrides):
    values = {
        "storage_type": "memory",
        "redis_url": "redis://localhost:6379/0",
        "default_ttl": 3600,
        "timeout_ms": 1000,
        "key_prefix": None,
    }
    values.update(overrides)
    return StorageConfig(**values)


class TestMemoryStorage:
    """Test in-memory storage."""

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        """Test basic operations."""
        storage = MemoryStorage(storage_config())

        await storage.set("a", "1")
        assert await storage.get("a") == "1"
        assert await storage.exists("a") is True

        await storage.delete("a")
        assert await storage.get("a") is None
        assert await storage.exists("a") is False

    @pytest.mark.asyncio
    async def test_missing_key(self):
        """Test reading an unknown key."""
        assert await MemoryStorage(storage_config()).get("nope") is None

    @pytest.mark.asyncio
    async def test_ttl_expiry(self, monkeypatch):
        """Test entries expire after their TTL."""
        now = [1000.0]
        monkeypatch.setattr(
            "qualitygate.remote_config.kv_storage.time.monotonic", lambda: now[0]
        )
        storage = MemoryStorage(storage_config())

        await storage.set("short", "v", ttl=10)
        await storage.set("forever", "v", ttl=0)

        now[0] += 11
        assert await storage.get("short") is None
        assert await storage.get("forever") == "v"

    @pytest.mark.asyncio
    async def test_cleanup(self, monkeypatch):
        """Test cleanup removes only expired entries."""
        now = [0.0]
        monkeypatch.setattr(
            "qualitygate.remote_config.kv_storage.time.monotonic", lambda: now[0]
        )
        storage = MemoryStorage(storage_config())
        await storage.set("a", "1", ttl=5)
        await storage.set("b", "2", ttl=50)

        now[0] = 10
        assert storage.cleanup() == 1
        assert len(storage) == 1

    @pytest.mark.asyncio
    async def test_key_prefix(self):
        """Test keys are namespaced by the prefix."""
        storage = MemoryStorage(storage_config(key_prefix="app"))
        await storage.set("k", "v")

        assert "app:k" in storage._store
        assert await storage.get("k") == "v"


class TestRedisStorage:
    """Test Redis storage with a mocked client."""

    @pytest.fixture
    def client(self):
        client = AsyncMock()
        client.get.return_value = "value"
        return client

    @pytest.mark.asyncio
    async def test_get(self, client):
        """Test reads go through the client."""
        storage = RedisStorage(storage_config(key_prefix="qg"), client=client)

        assert await storage.get("k") == "value"
        client.get.assert_awaited_once_with("qg:k")

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self, client):
        """Test byte responses are decoded."""
        client.get.return_value = b"raw"
        storage = RedisStorage(storage_config(), client=client)

        assert await storage.get("k") == "raw"

    @pytest.mark.asyncio
    async def test_set_ttl(self, client):
        """Test TTL resolution on writes."""
        storage = RedisStorage(storage_config(default_ttl=60), client=client)

        await storage.set("a", "1")
        client.set.assert_awaited_with("a", "1", ex=60)

        await storage.set("b", "2", ttl=0)
        client.set.assert_awaited_with("b", "2", ex=None)

    @pytest.mark.asyncio
    async def test_get_failure_returns_none(self, client):
        """Test read failures degrade to None."""
        client.get.side_effect = RedisConnectionError("down")
        storage = RedisStorage(storage_config(), client=client)

        assert await storage.get("k") is None

    @pytest.mark.asyncio
    async def test_write_failures_raise(self, client):
        """Test write failures raise StorageError."""
        client.set.side_effect = RedisConnectionError("down")
        client.delete.side_effect = RedisConnectionError("down")
        storage = RedisStorage(storage_config(), client=client)

        with pytest.raises(StorageError):
            await storage.set("k", "v")
        with pytest.raises(StorageError):
            await storage.delete("k")

    @pytest.mark.asyncio
    async def test_close(self, client):
        """Test closing releases the client."""
        storage = RedisStorage(storage_config(), client=client)
        await storage.close()

        client.aclose.assert_awaited_once()
        assert storage._client is None


class TestCreateKVStorage:
    """Test backend selection."""

    def test_memory(self):
        """Test memory backend selection."""
        assert isinstance(create_kv_storage(storage_config()), MemoryStorage)

    def test_redis(self):
        """Test redis backend selection without connecting."""
        storage = create_kv_storage(storage_config(storage_type="Redis"))
        assert isinstance(storage, RedisStorage)
        assert storage._client is None

    def test_invalid_redis_url(self):
        """Test a malformed Redis URL is rejected."""
        with pytest.raises(ConfigurationError):
            create_kv_storage(storage_config(storage_type="redis", redis_url="localhost:6379"))

    def test_unknown_type(self):
        """Test unknown backends are rejected."""
        with pytest.raises(ConfigurationError):
            create_kv_storage(storage_config(storage_type="vercel-kv"))
