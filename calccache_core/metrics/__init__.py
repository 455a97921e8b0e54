"""Metrics module - Cache statistics."""

from calccache_core.metrics.collector import CacheStats, StatsCollector

__all__ = ["CacheStats", "StatsCollector"]
