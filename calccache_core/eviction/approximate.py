"""CalcCache Approximate LRU Policy - Synthetic Recency Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Mapping, Optional

from calccache_core.cache.entry import HIT_WEIGHT_SECONDS, CacheEntry
from calccache_core.eviction.policy import EvictionPolicy


class ApproximateLRUPolicy(EvictionPolicy):
    """Approximate Least Recently Used eviction policy.

    Real last-access instants are not tracked. Instead each entry gets a
    synthetic access time of ``created_at + hit_count * hit_weight`` and
    the entry with the smallest one is evicted.

    Properties:
    - O(1) bookkeeping on read (a counter increment)
    - O(n) scan, only when a namespace is full
    - Frequently hit entries survive longer than cold ones
    - Ties go to the earliest inserted entry

    Example:
        policy = ApproximateLRUPolicy()
        victim = policy.choose_victim({"a": entry_a, "b": entry_b})
    """

    name = "approximate_lru"

    def __init__(self, hit_weight: float = HIT_WEIGHT_SECONDS):
        """Initialize policy.

        Args:
            hit_weight: Seconds each hit adds to the synthetic access time
        """
        self.hit_weight = hit_weight

    def synthetic_access_time(self, entry: CacheEntry) -> float:
        return entry.created_at + entry.hit_count * self.hit_weight

    def choose_victim(self, entries: Mapping[str, CacheEntry]) -> Optional[str]:
        victim: Optional[str] = None
        oldest = float("inf")

        for key, entry in entries.items():
            access_time = self.synthetic_access_time(entry)
            if access_time < oldest:
                oldest = access_time
                victim = key

        return victim

    def __repr__(self) -> str:
        return f"ApproximateLRUPolicy(hit_weight={self.hit_weight})"


__all__ = ["ApproximateLRUPolicy"]
