"""Key-value storage backends for the remote log configuration.

PATTERN: Async interface with in-memory and Redis implementations
CRITICAL: Writes propagate StorageError; reads degrade to None on failure
GOTCHA: ttl=None uses the configured default, ttl<=0 stores without expiry
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..config.admin_config import StorageConfig
from ..exceptions import ConfigurationError, StorageError

logger = logging.getLogger(__name__)


class KVStorage(ABC):
    """Minimal async key-value interface."""

    storage_type: str = "abstract"

    def __init__(self, config: Optional[StorageConfig] = None):
        self.config = config or StorageConfig()
        self.logger = logger

    def _key(self, key: str) -> str:
        prefix = self.config.key_prefix
        return f"{prefix}:{key}" if prefix else key

    def _ttl(self, ttl: Optional[int]) -> Optional[int]:
        if ttl is None:
            return self.config.default_ttl
        return ttl if ttl > 0 else None

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store a value with optional expiry (seconds)."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key if present."""

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def close(self) -> None:
        """Release backend resources."""


class MemoryStorage(KVStorage):
    """
    Process-local storage with lazy TTL expiry.

    GOTCHA: Not shared between worker processes
    """

    storage_type = "memory"

    def __init__(self, config: Optional[StorageConfig] = None):
        super().__init__(config)
        self._store: Dict[str, Tuple[str, Optional[float]]] = {}

    def _expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and time.monotonic() >= expires_at

    async def get(self, key: str) -> Optional[str]:
        entry = self._store.get(self._key(key))
        if entry is None:
            return None

        value, expires_at = entry
        if self._expired(expires_at):
            del self._store[self._key(key)]
            return None
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        seconds = self._ttl(ttl)
        expires_at = time.monotonic() + seconds if seconds else None
        self._store[self._key(key)] = (value, expires_at)

    async def delete(self, key: str) -> None:
        self._store.pop(self._key(key), None)

    def cleanup(self) -> int:
        """Drop expired entries and return how many were removed."""
        expired = [k for k, (_, exp) in self._store.items() if self._expired(exp)]
        for k in expired:
            del self._store[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)


class RedisStorage(KVStorage):
    """
    Redis-backed storage using ``redis.asyncio``.

    PATTERN: Lazy client creation on first use
    CRITICAL: Every operation is bounded by the configured timeout
    """

    storage_type = "redis"

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        client: Optional[redis.Redis] = None,
    ):
        super().__init__(config)
        self._client = client

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            timeout = self.config.timeout_ms / 1000
            self._client = redis.from_url(
                self.config.redis_url,
                decode_responses=True,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
            )
            self.logger.info("Redis storage client created")
        return self._client

    async def _call(self, coro):
        return await asyncio.wait_for(coro, timeout=self.config.timeout_ms / 1000)

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self._call(self._get_client().get(self._key(key)))
        except (RedisError, asyncio.TimeoutError, OSError) as e:
            self.logger.warning(f"Redis get failed for {key}: {e}")
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        seconds = self._ttl(ttl)
        try:
            await self._call(self._get_client().set(self._key(key), value, ex=seconds))
        except (RedisError, asyncio.TimeoutError, OSError) as e:
            self.logger.warning(f"Redis set failed for {key}: {e}")
            raise StorageError(f"Failed to store {key}: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._call(self._get_client().delete(self._key(key)))
        except (RedisError, asyncio.TimeoutError, OSError) as e:
            self.logger.warning(f"Redis delete failed for {key}: {e}")
            raise StorageError(f"Failed to delete {key}: {e}") from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def create_kv_storage(config: Optional[StorageConfig] = None) -> KVStorage:
    """
    Create the storage backend selected by configuration.

    Raises:
        ConfigurationError: If the storage type is unknown or misconfigured
    """
    config = config or StorageConfig()
    storage_type = config.storage_type.lower()

    if storage_type == "memory":
        return MemoryStorage(config)
    if storage_type == "redis":
        if not config.redis_url.startswith(("redis://", "rediss://", "unix://")):
            raise ConfigurationError(f"Invalid Redis URL: {config.redis_url}")
        return RedisStorage(config)

    raise ConfigurationError(f"Unknown KV storage type: {config.storage_type}")
