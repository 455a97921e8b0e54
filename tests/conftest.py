"""Shared test fixtures.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from calccache_core.cache.cache import CacheConfig, NamespacedCache
from calccache_core.store.memory import MemoryStore


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def cache(clock, store):
    return NamespacedCache(CacheConfig(), store=store, clock=clock)
