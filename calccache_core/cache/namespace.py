"""CalcCache Namespace - Independently Policed Cache Partitions.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from calccache_core.cache.entry import CacheEntry
from calccache_core.eviction.policy import EvictionPolicy

MINUTE = 60.0
HOUR = 60 * MINUTE


@dataclass
class NamespacePolicy:
    """Expiry and capacity policy for a namespace.

    Attributes:
        ttl: Default TTL in seconds (None = global default)
        max_size: Maximum entries (None = global default)
    """

    ttl: Optional[float] = None
    max_size: Optional[int] = None

    def resolve(self, default_ttl: float, default_max_size: int) -> "NamespacePolicy":
        """Fill missing fields from global defaults.

        Raises:
            ValueError: If the resolved max_size is below 1
        """
        max_size = self.max_size if self.max_size is not None else default_max_size
        if max_size < 1:
            raise ValueError(f"Namespace max_size must be at least 1, got {max_size}")

        return NamespacePolicy(
            ttl=self.ttl if self.ttl is not None else default_ttl,
            max_size=max_size,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"ttl": self.ttl, "max_size": self.max_size}


DEFAULT_POLICIES: Dict[str, NamespacePolicy] = {
    "calculations": NamespacePolicy(ttl=1 * HOUR, max_size=50),
    "configurations": NamespacePolicy(ttl=24 * HOUR, max_size=20),
    "user_selections": NamespacePolicy(ttl=30 * MINUTE, max_size=30),
    "product_data": NamespacePolicy(ttl=12 * HOUR, max_size=10),
    "projections": NamespacePolicy(ttl=2 * HOUR, max_size=40),
    "recommendations": NamespacePolicy(ttl=15 * MINUTE, max_size=25),
}


class Namespace:
    """A named cache partition holding entries under one policy.

    Namespaces do no locking of their own; the owning cache serializes
    access.
    """

    def __init__(self, name: str, policy: NamespacePolicy, persistent: bool = False):
        """Initialize namespace.

        Args:
            name: Namespace name
            policy: Resolved policy (ttl and max_size set)
            persistent: Whether contents are saved to durable storage
        """
        self.name = name
        self.policy = policy
        self.persistent = persistent
        self._entries: Dict[str, CacheEntry] = {}

    @property
    def ttl(self) -> float:
        return self.policy.ttl

    @property
    def max_size(self) -> int:
        return self.policy.max_size

    @property
    def is_full(self) -> bool:
        return len(self._entries) >= self.max_size

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def put(self, entry: CacheEntry, policy: EvictionPolicy) -> Optional[CacheEntry]:
        """Insert or overwrite an entry, evicting first if full.

        Args:
            entry: Entry to insert
            policy: Eviction policy used when full

        Returns:
            The evicted entry, if any
        """
        evicted = None
        if entry.key not in self._entries and self.is_full:
            victim = policy.choose_victim(self._entries)
            if victim is not None:
                evicted = self._entries.pop(victim)

        self._entries[entry.key] = entry
        return evicted

    def remove(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def remove_expired(self, now: float) -> int:
        """Remove all expired entries.

        Args:
            now: Current timestamp

        Returns:
            Number removed
        """
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def memory_usage(self) -> int:
        return sum(e.size_bytes for e in self._entries.values())

    def to_pairs(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Get entries in persisted ``[key, entry]`` form."""
        return [(k, e.to_dict()) for k, e in self._entries.items()]

    def report(self) -> Dict[str, Any]:
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "policy": self.policy.to_dict(),
            "persistent": self.persistent,
        }

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Namespace(name={self.name!r}, entries={len(self._entries)})"


__all__ = ["Namespace", "NamespacePolicy", "DEFAULT_POLICIES"]
