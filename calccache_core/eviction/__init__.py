"""Eviction module - Cache eviction policies."""

from calccache_core.eviction.policy import EvictionPolicy
from calccache_core.eviction.approximate import ApproximateLRUPolicy

__all__ = [
    "EvictionPolicy",
    "ApproximateLRUPolicy",
]
