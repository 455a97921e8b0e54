"""CalcCache Redis Store - Redis Durable Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from calccache_core.store.backend import DurableStore, StorageUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class RedisConfig:
    """Redis-specific configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        prefix: Key prefix applied to every key
    """

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    prefix: str = "calccache:"


class RedisStore(DurableStore):
    """Redis durable store.

    Payloads are kept as plain Redis strings. Entry expiry is enforced
    by the cache on load, so no Redis TTL is set.

    Example:
        store = RedisStore(RedisConfig(host="redis.local", port=6379))
        store.write("cache_configurations", "[]")
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Any] = None,
    ):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Pre-built client (skips connection setup)
        """
        super().__init__()
        self.config = config or RedisConfig()
        self._client: Optional[Any] = client
        self._pool: Optional[Any] = None

    def _ensure_connected(self) -> Any:
        """Ensure Redis connection exists.

        Returns:
            Redis client

        Raises:
            StorageUnavailableError: If the server cannot be reached
        """
        if self._client is not None:
            return self._client

        import redis

        try:
            self._pool = redis.ConnectionPool(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                max_connections=self.config.max_connections,
            )
            client = redis.Redis(connection_pool=self._pool)
            client.ping()
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._pool = None
            raise StorageUnavailableError(str(e)) from e

        logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
        self._client = client
        return client

    def _make_key(self, key: str) -> str:
        return f"{self.config.prefix}{key}"

    def read(self, key: str) -> Optional[str]:
        client = self._ensure_connected()
        self._stats.reads += 1
        data = client.get(self._make_key(key))

        if data is None:
            return None
        return data.decode("utf-8") if isinstance(data, bytes) else data

    def write(self, key: str, value: str) -> bool:
        try:
            client = self._ensure_connected()
            client.set(self._make_key(key), value)
            self._stats.writes += 1
            return True

        except Exception as e:
            logger.error(f"Redis set error: {e}")
            self._stats.record_error(str(e))
            return False

    def delete(self, key: str) -> bool:
        try:
            client = self._ensure_connected()
            result = client.delete(self._make_key(key))
            self._stats.deletes += 1
            return result > 0

        except Exception as e:
            logger.error(f"Redis delete error: {e}")
            self._stats.record_error(str(e))
            return False

    def keys(self, prefix: str = "") -> List[str]:
        client = self._ensure_connected()
        pattern = f"{self.config.prefix}{prefix}*"
        prefix_len = len(self.config.prefix)

        keys = []
        cursor = 0
        while True:
            cursor, batch = client.scan(cursor, match=pattern, count=100)
            for key in batch:
                key_str = key.decode("utf-8") if isinstance(key, bytes) else key
                keys.append(key_str[prefix_len:])
            if cursor == 0:
                break

        return keys

    def close(self) -> None:
        """Close Redis connection."""
        if self._pool:
            self._pool.disconnect()
            self._pool = None
            self._client = None

    def __repr__(self) -> str:
        return f"RedisStore(host={self.config.host}, port={self.config.port})"


__all__ = ["RedisStore", "RedisConfig"]
