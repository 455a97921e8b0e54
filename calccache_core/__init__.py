"""CalcCache - Multi-Namespace Expiring Cache.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A memoization cache for the expense calculator with:
- Fixed namespaces, each with its own TTL and size cap
- Deterministic keys derived from lookup parameters
- Approximate-LRU eviction when a namespace is full
- Lazy and periodic expiry
- Durable persistence of selected namespaces (memory, file, Redis)
- Running hit/miss/eviction statistics

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        CalcCache System                         │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │ Namespaced  │  │  Namespace  │  │   Entry     │   CACHE     │
    │  │    Cache    │  │ TTL / size  │  │ hits / TTL  │   LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────┐  ┌────┴──────────┐  ┌──┴──────────┐         │
    │  │ Approx. LRU   │  │ Value codec   │  │ Statistics  │ POLICY  │
    │  └──────┬────────┘  └────┬──────────┘  └──┬──────────┘         │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │              Durable Stores                    │   STORAGE   │
    │  │   ┌────────┐  ┌────────┐  ┌────────┐          │   LAYER     │
    │  │   │ Memory │  │  File  │  │ Redis  │          │             │
    │  │   └────────┘  └────────┘  └────────┘          │             │
    │  └───────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from calccache_core import NamespacedCache, FileStore

    cache = NamespacedCache(store=FileStore("/var/cache/calccache"))
    cache.init()

    key = {"cleaning_products": "standard", "water_consumption": "medium"}
    result = cache.get("calculations", key)
    if result is None:
        result = calculate_expenses(key)
        cache.set("calculations", key, result)

    cache.on_suspend()  # host going to background
    cache.destroy()     # last-chance flush
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from calccache_core.cache.entry import CacheEntry, MalformedEntryError
from calccache_core.cache.keys import derive_key, hash_string
from calccache_core.cache.namespace import (
    Namespace,
    NamespacePolicy,
    DEFAULT_POLICIES,
)
from calccache_core.cache.cache import NamespacedCache, CacheConfig
from calccache_core.cache.calculations import CalculationCache
from calccache_core.cache.decorator import cached
from calccache_core.cache.warmup import CacheWarmer, WarmupStats
from calccache_core.store.backend import (
    DurableStore,
    StorageStats,
    StorageUnavailableError,
)
from calccache_core.store.memory import MemoryStore
from calccache_core.store.file import FileStore
from calccache_core.store.redis import RedisStore, RedisConfig
from calccache_core.eviction.policy import EvictionPolicy
from calccache_core.eviction.approximate import ApproximateLRUPolicy
from calccache_core.protocol.serializer import (
    CompressionType,
    JSONSerializer,
    ValueCodec,
)
from calccache_core.metrics.collector import CacheStats, StatsCollector

__all__ = [
    # Cache
    "NamespacedCache",
    "CacheConfig",
    "CacheEntry",
    "MalformedEntryError",
    "Namespace",
    "NamespacePolicy",
    "DEFAULT_POLICIES",
    "derive_key",
    "hash_string",
    # Helpers
    "CalculationCache",
    "cached",
    "CacheWarmer",
    "WarmupStats",
    # Storage
    "DurableStore",
    "StorageStats",
    "StorageUnavailableError",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
    # Eviction
    "EvictionPolicy",
    "ApproximateLRUPolicy",
    # Protocol
    "CompressionType",
    "JSONSerializer",
    "ValueCodec",
    # Metrics
    "CacheStats",
    "StatsCollector",
]
