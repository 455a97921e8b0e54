"""Store module - Durable storage backends."""

from calccache_core.store.backend import (
    DurableStore,
    StorageStats,
    StorageUnavailableError,
)
from calccache_core.store.memory import MemoryStore
from calccache_core.store.file import FileStore
from calccache_core.store.redis import RedisStore, RedisConfig

__all__ = [
    "DurableStore",
    "StorageStats",
    "StorageUnavailableError",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
]
