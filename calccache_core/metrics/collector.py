"""CalcCache Metrics Collector - Cache Statistics and Monitoring.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Cache statistics.

    Attributes:
        hits: Number of cache hits
        misses: Number of cache misses
        evictions: Entries evicted to make room
        expirations: Entries removed because their TTL elapsed
        total_requests: Number of get operations
        compressions: Entries compressed at insert time
        memory_usage: Sum of entry sizes in bytes
        last_cleanup_at: When the last sweep finished
        started_at: When statistics started
    """

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    total_requests: int = 0
    compressions: int = 0
    memory_usage: int = 0
    last_cleanup_at: Optional[datetime] = None
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def cache_efficiency(self) -> float:
        """Hit percentage over all requests."""
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "total_requests": self.total_requests,
            "compressions": self.compressions,
            "cache_efficiency": self.cache_efficiency,
            "memory_usage": self.memory_usage,
            "last_cleanup_at": (
                self.last_cleanup_at.isoformat() if self.last_cleanup_at else None
            ),
        }


class StatsCollector:
    """Collects running cache counters.

    Counters are process-wide for one cache instance, not per namespace.
    When disabled every ``record_*`` call is a no-op.

    Example:
        collector = StatsCollector()
        collector.record_hit()
        collector.record_miss()

        stats = collector.snapshot()
        print(f"Efficiency: {stats.cache_efficiency:.1f}%")
    """

    def __init__(self, enabled: bool = True):
        """Initialize collector.

        Args:
            enabled: Whether counters are updated
        """
        self.enabled = enabled
        self._stats = CacheStats()
        self._lock = threading.Lock()

    def record_hit(self) -> None:
        """Record a cache hit."""
        if self.enabled:
            with self._lock:
                self._stats.total_requests += 1
                self._stats.hits += 1

    def record_miss(self) -> None:
        """Record a cache miss."""
        if self.enabled:
            with self._lock:
                self._stats.total_requests += 1
                self._stats.misses += 1

    def record_eviction(self) -> None:
        """Record an eviction."""
        if self.enabled:
            with self._lock:
                self._stats.evictions += 1

    def record_expiration(self, count: int = 1) -> None:
        """Record expired entries being removed."""
        if self.enabled:
            with self._lock:
                self._stats.expirations += count

    def record_compression(self) -> None:
        """Record a compressed insert."""
        if self.enabled:
            with self._lock:
                self._stats.compressions += 1

    def record_cleanup(self) -> None:
        """Record sweep completion time."""
        with self._lock:
            self._stats.last_cleanup_at = datetime.now()

    def snapshot(self, memory_usage: int = 0) -> CacheStats:
        """Get a copy of current statistics.

        Args:
            memory_usage: Current memory usage to report

        Returns:
            CacheStats copy
        """
        with self._lock:
            return replace(self._stats, memory_usage=memory_usage)

    def reset(self) -> None:
        """Reset all counters."""
        with self._lock:
            self._stats = CacheStats()

    def to_prometheus(self, memory_usage: int = 0) -> str:
        """Export statistics in Prometheus format.

        Returns:
            Prometheus-formatted metrics
        """
        stats = self.snapshot(memory_usage)
        lines = [
            "# HELP calccache_hits_total Total cache hits",
            "# TYPE calccache_hits_total counter",
            f"calccache_hits_total {stats.hits}",
            "",
            "# HELP calccache_misses_total Total cache misses",
            "# TYPE calccache_misses_total counter",
            f"calccache_misses_total {stats.misses}",
            "",
            "# HELP calccache_evictions_total Entries evicted at capacity",
            "# TYPE calccache_evictions_total counter",
            f"calccache_evictions_total {stats.evictions}",
            "",
            "# HELP calccache_expirations_total Entries removed after TTL",
            "# TYPE calccache_expirations_total counter",
            f"calccache_expirations_total {stats.expirations}",
            "",
            "# HELP calccache_efficiency_percent Hit percentage",
            "# TYPE calccache_efficiency_percent gauge",
            f"calccache_efficiency_percent {stats.cache_efficiency:.2f}",
            "",
            "# HELP calccache_memory_bytes Approximate entry size",
            "# TYPE calccache_memory_bytes gauge",
            f"calccache_memory_bytes {stats.memory_usage}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        stats = self.snapshot()
        return (
            f"StatsCollector(hits={stats.hits}, "
            f"efficiency={stats.cache_efficiency:.1f}%)"
        )


__all__ = ["CacheStats", "StatsCollector"]
