"""Cache module - Core caching functionality.

This module provides the namespaced cache, its entries and the
caller-side helpers built on top of it.
"""

from calccache_core.cache.entry import (
    CacheEntry,
    MalformedEntryError,
)
from calccache_core.cache.keys import derive_key, hash_string
from calccache_core.cache.namespace import (
    Namespace,
    NamespacePolicy,
    DEFAULT_POLICIES,
)
from calccache_core.cache.persistence import NamespacePersistence
from calccache_core.cache.cache import (
    NamespacedCache,
    CacheConfig,
)
from calccache_core.cache.calculations import CalculationCache
from calccache_core.cache.decorator import cached
from calccache_core.cache.warmup import CacheWarmer, WarmupStats

__all__ = [
    "CacheEntry",
    "MalformedEntryError",
    "derive_key",
    "hash_string",
    "Namespace",
    "NamespacePolicy",
    "DEFAULT_POLICIES",
    "NamespacePersistence",
    "NamespacedCache",
    "CacheConfig",
    "CalculationCache",
    "cached",
    "CacheWarmer",
    "WarmupStats",
]
