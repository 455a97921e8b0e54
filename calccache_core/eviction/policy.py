"""CalcCache Eviction Policy - Abstract Eviction Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Mapping, Optional

from calccache_core.cache.entry import CacheEntry

logger = logging.getLogger(__name__)


class EvictionPolicy(ABC):
    """Abstract base for eviction policies.

    Eviction policies choose which entry of a full namespace is removed
    before a new one is inserted. Policies are stateless with respect to
    the namespace: everything they need is carried on the entries.

    Example:
        policy = ApproximateLRUPolicy()
        victim = policy.choose_victim(namespace_entries)
    """

    name = "abstract"

    @abstractmethod
    def choose_victim(self, entries: Mapping[str, CacheEntry]) -> Optional[str]:
        """Choose key to evict.

        Args:
            entries: Entries of the full namespace, in insertion order

        Returns:
            Key to evict or None if entries is empty
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


__all__ = ["EvictionPolicy"]
