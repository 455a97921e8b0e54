"""CalcCache Cache - Multi-Namespace Expiring Cache.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from calccache_core.cache.entry import CacheEntry, MalformedEntryError
from calccache_core.cache.keys import derive_key
from calccache_core.cache.namespace import (
    DEFAULT_POLICIES,
    MINUTE,
    Namespace,
    NamespacePolicy,
)
from calccache_core.cache.persistence import NamespacePersistence
from calccache_core.eviction.approximate import ApproximateLRUPolicy
from calccache_core.eviction.policy import EvictionPolicy
from calccache_core.metrics.collector import CacheStats, StatsCollector
from calccache_core.protocol.serializer import CompressionType, ValueCodec
from calccache_core.store.backend import DurableStore

logger = logging.getLogger(__name__)

# option name -> (field name, divisor applied to the value)
_OPTION_ALIASES = {
    "maxCacheSize": ("max_cache_size", None),
    "defaultTTL": ("default_ttl", 1000),
    "defaultTTLMs": ("default_ttl", 1000),
    "cleanupIntervalMs": ("cleanup_interval", 1000),
    "cleanupInterval": ("cleanup_interval", 1000),
    "compressionEnabled": ("compression_enabled", None),
    "persistentNamespaces": ("persistent_namespaces", None),
    "persistentCaches": ("persistent_namespaces", None),
    "statisticsEnabled": ("statistics_enabled", None),
    "enableStatistics": ("statistics_enabled", None),
    "storagePrefix": ("storage_prefix", None),
}


def _default_persistent() -> Set[str]:
    return {"configurations", "product_data"}


def _default_policies() -> Dict[str, NamespacePolicy]:
    return {name: NamespacePolicy(p.ttl, p.max_size) for name, p in DEFAULT_POLICIES.items()}


def _policy_from_dict(policy: Any) -> NamespacePolicy:
    """Build a namespace policy from a mapping.

    ``{"ttl", "max_size"}`` takes seconds. A camelCase ``{"ttl", "maxSize"}``
    mapping takes milliseconds, as does an explicit ``ttlMs``/``ttl_ms``.
    """
    if isinstance(policy, NamespacePolicy):
        return policy

    ttl = policy.get("ttl")
    if "ttlMs" in policy or "ttl_ms" in policy:
        ttl = policy.get("ttlMs", policy.get("ttl_ms")) / 1000
    elif ttl is not None and "maxSize" in policy:
        ttl = ttl / 1000

    return NamespacePolicy(
        ttl=ttl,
        max_size=policy.get("max_size", policy.get("maxSize")),
    )


@dataclass
class CacheConfig:
    """Cache configuration.

    Attributes:
        max_cache_size: Default per-namespace entry cap
        default_ttl: Fallback TTL in seconds
        cleanup_interval: Seconds between background sweeps
        compression_enabled: Wrap values in a compression envelope
        compression: Envelope type used when compressing
        persistent_namespaces: Namespaces saved to durable storage
        statistics_enabled: Update running counters
        storage_prefix: Reserved key prefix in the durable store
        policies: Per-namespace TTL and size overrides
    """

    max_cache_size: int = 100
    default_ttl: float = 30 * MINUTE
    cleanup_interval: float = 5 * MINUTE
    compression_enabled: bool = True
    compression: CompressionType = CompressionType.ENVELOPE
    persistent_namespaces: Set[str] = field(default_factory=_default_persistent)
    statistics_enabled: bool = True
    storage_prefix: str = "cache_"
    policies: Dict[str, NamespacePolicy] = field(default_factory=_default_policies)

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "CacheConfig":
        """Build configuration from an options mapping.

        Accepts field names as well as camelCase option names. Options
        ending in milliseconds are converted to seconds.

        Args:
            options: Configuration options

        Returns:
            CacheConfig instance
        """
        fields = set(cls.__dataclass_fields__)
        kwargs: Dict[str, Any] = {}

        for name, value in options.items():
            if name in _OPTION_ALIASES:
                name, divisor = _OPTION_ALIASES[name]
                if divisor is not None:
                    value = value / divisor
            if name not in fields:
                logger.warning(f"Ignoring unknown cache option: {name}")
                continue
            kwargs[name] = value

        if "persistent_namespaces" in kwargs:
            kwargs["persistent_namespaces"] = set(kwargs["persistent_namespaces"])

        if "compression" in kwargs and not isinstance(kwargs["compression"], CompressionType):
            kwargs["compression"] = CompressionType(kwargs["compression"])

        if "policies" in kwargs:
            kwargs["policies"] = {
                name: _policy_from_dict(policy)
                for name, policy in kwargs["policies"].items()
            }

        return cls(**kwargs)


class NamespacedCache:
    """Expiring memoization cache split into fixed namespaces.

    Each namespace has its own TTL and size cap. Expired entries are
    dropped lazily on read and proactively by a background sweep.
    Namespaces listed as persistent are saved to a durable store after
    each sweep, on suspend and on destroy, and reloaded on init.

    The cache never raises for its own failures: unknown namespaces,
    serialization problems and storage errors degrade to a miss or a
    no-op so callers can always recompute.

    Example:
        cache = NamespacedCache(store=FileStore("/var/cache/calccache"))
        cache.init()

        key = {"cleaning_products": "standard", "water_consumption": "medium"}
        result = cache.get("calculations", key)
        if result is None:
            result = calculate(key)
            cache.set("calculations", key, result)

        cache.destroy()
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        store: Optional[DurableStore] = None,
        eviction: Optional[EvictionPolicy] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize cache.

        Args:
            config: Cache configuration
            store: Durable store for persistent namespaces (None = memory only)
            eviction: Eviction policy
            clock: Time source returning epoch seconds
        """
        self.config = config or CacheConfig()
        self._eviction = eviction or ApproximateLRUPolicy()
        self._clock = clock or time.time
        self._codec = ValueCodec(compression=self.config.compression)
        self._stats = StatsCollector(enabled=self.config.statistics_enabled)
        self._lock = threading.RLock()

        self._persistence: Optional[NamespacePersistence] = None
        if store is not None:
            self._persistence = NamespacePersistence(store, self.config.storage_prefix)

        self._namespaces: Dict[str, Namespace] = {}
        for name, policy in self.config.policies.items():
            try:
                resolved = policy.resolve(self.config.default_ttl, self.config.max_cache_size)
            except ValueError as e:
                raise ValueError(f"Invalid policy for namespace '{name}': {e}") from e
            persistent = name in self.config.persistent_namespaces
            self._namespaces[name] = Namespace(name, resolved, persistent=persistent)

        for name in self.config.persistent_namespaces - set(self._namespaces):
            logger.warning(f"Persistent namespace '{name}' has no policy and is ignored")

        # Sweep thread
        self._cleanup_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        self._initialized = False
        self._initialized_at: Optional[float] = None
        self._destroyed = False

    # Lifecycle

    def init(self) -> bool:
        """Load persistent namespaces and start the background sweep.

        Returns:
            True once initialized
        """
        if self._initialized:
            return True

        self.load_persistent()

        self._destroyed = False
        self._stop_event.clear()
        if self.config.cleanup_interval > 0:
            self._cleanup_thread = threading.Thread(
                target=self._cleanup_loop,
                daemon=True,
                name="CalcCache-sweep",
            )
            self._cleanup_thread.start()

        self._initialized = True
        self._initialized_at = self._clock()
        logger.info(
            f"Cache initialized with {len(self._namespaces)} namespaces "
            f"(sweep every {self.config.cleanup_interval}s)"
        )
        return True

    def flush(self) -> int:
        """Save persistent namespaces to the durable store.

        Does nothing once the cache has been destroyed.

        Returns:
            Number of namespaces saved
        """
        if self._destroyed:
            logger.debug("Cache destroyed, flush skipped")
            return 0
        return self._save_persistent()

    def on_suspend(self) -> int:
        """Host is going to the background; save persistent namespaces."""
        return self.flush()

    def destroy(self) -> None:
        """Stop the sweep, flush and release all entries.

        Safe to call more than once; only the first call flushes.
        """
        if self._destroyed:
            return
        self._destroyed = True

        self._stop_event.set()
        if self._cleanup_thread is not None:
            self._cleanup_thread.join(timeout=5.0)
            self._cleanup_thread = None

        self._save_persistent()

        final = self.get_statistics()
        self.clear()
        self._initialized = False
        logger.info(f"Cache destroyed, final statistics: {final}")

    def load_persistent(self) -> int:
        """Load persistent namespaces from the durable store.

        Expired and malformed entries are dropped.

        Returns:
            Number of entries loaded
        """
        if self._persistence is None:
            return 0

        total = 0
        for ns in self._namespaces.values():
            if not ns.persistent:
                continue
            items = self._persistence.load(ns.name)
            if items is None:
                continue
            with self._lock:
                ns.clear()
                loaded = self._load_items(ns, items, self._clock())
            logger.info(f"Loaded {loaded} entries into persistent namespace {ns.name}")
            total += loaded
        return total

    # Operations

    def get(self, namespace: str, key: Any, default: Any = None) -> Any:
        """Get value from a namespace.

        Args:
            namespace: Namespace name
            key: Lookup parameters (string or mapping)
            default: Value returned on miss

        Returns:
            Cached value or default
        """
        ns = self._get_namespace(namespace)
        cache_key = self._cache_key(key) if ns is not None else None

        with self._lock:
            if ns is None or cache_key is None:
                self._stats.record_miss()
                return default

            entry = ns.get(cache_key)
            if entry is None:
                self._stats.record_miss()
                return default

            if entry.is_expired(self._clock()):
                ns.remove(cache_key)
                self._stats.record_miss()
                self._stats.record_expiration()
                logger.debug(f"Cache EXPIRED: {namespace}/{cache_key}")
                return default

            entry.touch()
            self._stats.record_hit()
            stored, compressed = entry.value, entry.compressed
            logger.debug(f"Cache HIT: {namespace}/{cache_key} (hits: {entry.hit_count})")

        return self._codec.decode(stored) if compressed else stored

    def set(
        self,
        namespace: str,
        key: Any,
        value: Any,
        ttl: Optional[float] = None,
    ) -> bool:
        """Set value in a namespace.

        Args:
            namespace: Namespace name
            key: Lookup parameters (string or mapping)
            value: Value to cache
            ttl: TTL in seconds (None = namespace default)

        Returns:
            False if the namespace is unknown
        """
        ns = self._get_namespace(namespace)
        if ns is None:
            return False

        cache_key = self._cache_key(key)
        if cache_key is None:
            return False

        effective_ttl = ttl if ttl is not None else ns.ttl
        encoded = self._codec.encode(value, compress=self.config.compression_enabled)

        with self._lock:
            entry = CacheEntry(
                key=cache_key,
                value=encoded.stored,
                created_at=self._clock(),
                ttl_seconds=effective_ttl,
                compressed=encoded.compressed,
                size_bytes=encoded.size_bytes,
            )
            evicted = ns.put(entry, self._eviction)

            if encoded.compressed:
                self._stats.record_compression()
            if evicted is not None:
                self._stats.record_eviction()
                logger.debug(
                    f"Cache EVICT: {namespace}/{evicted.key} (hits: {evicted.hit_count})"
                )

        logger.debug(f"Cache SET: {namespace}/{cache_key} (TTL: {effective_ttl}s)")
        return True

    def remove(self, namespace: str, key: Any) -> bool:
        """Remove one entry.

        Args:
            namespace: Namespace name
            key: Lookup parameters

        Returns:
            True if an entry was removed
        """
        ns = self._get_namespace(namespace)
        cache_key = self._cache_key(key)
        if ns is None or cache_key is None:
            return False

        with self._lock:
            removed = ns.remove(cache_key)

        if removed:
            logger.debug(f"Cache REMOVE: {namespace}/{cache_key}")
        return removed

    def clear(self, namespace: Optional[str] = None) -> int:
        """Clear one namespace, or all when namespace is None.

        Returns:
            Number of entries removed
        """
        with self._lock:
            if namespace is not None:
                ns = self._get_namespace(namespace)
                targets = [ns] if ns is not None else []
            else:
                targets = list(self._namespaces.values())

            total = 0
            for ns in targets:
                count = ns.clear()
                if count:
                    logger.debug(f"Cache CLEAR: {ns.name} ({count} entries removed)")
                total += count
            return total

    def exists(self, namespace: str, key: Any) -> bool:
        """Check for a valid entry without counting a request."""
        ns = self._get_namespace(namespace)
        cache_key = self._cache_key(key)
        if ns is None or cache_key is None:
            return False

        with self._lock:
            entry = ns.get(cache_key)
            return entry is not None and entry.is_valid(self._clock())

    def get_or_set(
        self,
        namespace: str,
        key: Any,
        factory: Callable[[], Any],
        ttl: Optional[float] = None,
    ) -> Any:
        """Get value or compute and store it.

        Args:
            namespace: Namespace name
            key: Lookup parameters
            factory: Called on miss to compute the value
            ttl: TTL for the new value

        Returns:
            Cached or computed value
        """
        missing = object()
        value = self.get(namespace, key, missing)
        if value is not missing:
            return value

        value = factory()
        self.set(namespace, key, value, ttl=ttl)
        return value

    def sweep(self) -> int:
        """Remove expired entries from every namespace, then flush.

        Returns:
            Number of entries removed
        """
        started = time.monotonic()
        removed = 0

        with self._lock:
            now = self._clock()
            for ns in self._namespaces.values():
                count = ns.remove_expired(now)
                if count:
                    logger.debug(f"Cache CLEANUP: {ns.name} ({count} expired entries removed)")
                removed += count

            if removed:
                self._stats.record_expiration(removed)
            self._stats.record_cleanup()

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug(f"Cache sweep completed ({elapsed_ms:.1f}ms, {removed} entries removed)")

        self.flush()
        return removed

    # Introspection

    def size(self, namespace: str) -> int:
        """Get entry count of a namespace (0 if unknown)."""
        ns = self._namespaces.get(namespace)
        return len(ns) if ns is not None else 0

    @property
    def namespaces(self) -> List[str]:
        return list(self._namespaces)

    def memory_usage(self) -> int:
        """Sum of approximate entry sizes across all namespaces."""
        with self._lock:
            return sum(ns.memory_usage() for ns in self._namespaces.values())

    def get_stats(self) -> CacheStats:
        """Get cache statistics.

        Returns:
            CacheStats snapshot
        """
        return self._stats.snapshot(memory_usage=self.memory_usage())

    def get_statistics(self) -> Dict[str, Any]:
        """Get a statistics report with per-namespace details.

        Returns:
            Report dictionary
        """
        report = self.get_stats().to_dict()

        if self._initialized and self._initialized_at is not None:
            report["uptime_seconds"] = self._clock() - self._initialized_at
        else:
            report["uptime_seconds"] = 0.0

        with self._lock:
            report["namespaces"] = {
                name: ns.report() for name, ns in self._namespaces.items()
            }

        report["config"] = {
            "max_cache_size": self.config.max_cache_size,
            "default_ttl": self.config.default_ttl,
            "cleanup_interval": self.config.cleanup_interval,
            "compression_enabled": self.config.compression_enabled,
            "persistent_namespaces": sorted(self.config.persistent_namespaces),
            "statistics_enabled": self.config.statistics_enabled,
        }
        return report

    def to_prometheus(self) -> str:
        """Export statistics in Prometheus text format."""
        return self._stats.to_prometheus(memory_usage=self.memory_usage())

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats.reset()

    # Export / import

    def export_all(self) -> Dict[str, Any]:
        """Export every namespace's entries with a statistics snapshot.

        Returns:
            Export dictionary
        """
        with self._lock:
            namespaces = {
                name: [[key, entry] for key, entry in ns.to_pairs()]
                for name, ns in self._namespaces.items()
            }

        return {
            "namespaces": namespaces,
            "statistics": self.get_statistics(),
            "exported_at": datetime.now().isoformat(),
        }

    def import_all(self, data: Dict[str, Any]) -> bool:
        """Replace namespaces present in an export payload.

        Entries are revalidated; expired or malformed ones are dropped.
        Namespaces absent from the payload are left untouched.

        Args:
            data: Payload as produced by export_all

        Returns:
            True if the payload was applied
        """
        namespaces = data.get("namespaces") if isinstance(data, dict) else None
        if not isinstance(namespaces, dict):
            logger.warning("Cache import payload has no namespaces mapping")
            return False

        with self._lock:
            now = self._clock()
            for name, items in namespaces.items():
                ns = self._namespaces.get(name)
                if ns is None:
                    logger.warning(f"Skipping import of unknown namespace '{name}'")
                    continue
                if not isinstance(items, list):
                    logger.warning(f"Skipping import of namespace '{name}': not a list")
                    continue

                ns.clear()
                loaded = self._load_items(ns, items, now)
                logger.debug(f"Imported {loaded} entries into namespace {name}")

        logger.info("Cache data imported")
        return True

    # Internals

    def _save_persistent(self) -> int:
        if self._persistence is None:
            return 0

        saved = 0
        for ns in self._namespaces.values():
            if not ns.persistent:
                continue
            with self._lock:
                pairs = ns.to_pairs()
            if self._persistence.save(ns.name, pairs):
                saved += 1
        return saved

    def _get_namespace(self, name: str) -> Optional[Namespace]:
        ns = self._namespaces.get(name)
        if ns is None:
            logger.warning(f"Cache namespace '{name}' does not exist")
        return ns

    def _cache_key(self, key: Any) -> Optional[str]:
        try:
            return derive_key(key)
        except (TypeError, ValueError) as e:
            logger.warning(f"Cannot derive cache key: {e}")
            return None

    def _load_items(self, ns: Namespace, items: Iterable[Any], now: float) -> int:
        """Insert persisted ``[key, entry]`` items that are still valid.

        Must be called with the lock held.
        """
        loaded = 0
        for item in items:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                continue
            try:
                entry = CacheEntry.from_dict(item[0], item[1])
            except MalformedEntryError as e:
                logger.debug(f"Dropping malformed entry in {ns.name}: {e}")
                continue
            if entry.is_expired(now):
                continue

            if ns.put(entry, self._eviction) is not None:
                self._stats.record_eviction()
            loaded += 1
        return loaded

    def _cleanup_loop(self) -> None:
        """Background sweep loop."""
        while not self._stop_event.wait(self.config.cleanup_interval):
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Cleanup error: {e}")

    def __contains__(self, namespace: str) -> bool:
        return namespace in self._namespaces

    def __enter__(self) -> "NamespacedCache":
        self.init()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.destroy()

    def __repr__(self) -> str:
        total = sum(len(ns) for ns in self._namespaces.values())
        return f"NamespacedCache(namespaces={len(self._namespaces)}, entries={total})"


__all__ = ["NamespacedCache", "CacheConfig"]
