"""Tests for persistence, lifecycle and export/import.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import json

import pytest

from calccache_core.cache.cache import CacheConfig, NamespacedCache
from calccache_core.cache.namespace import HOUR
from calccache_core.store.file import FileStore
from calccache_core.store.memory import MemoryStore


class CountingStore(MemoryStore):
    """Memory store counting writes."""

    def __init__(self):
        super().__init__()
        self.write_calls = 0

    def write(self, key, value):
        self.write_calls += 1
        return super().write(key, value)


def _persisted_entry(value, created_at, ttl):
    return {
        "value": value,
        "created_at": created_at,
        "ttl": ttl,
        "hit_count": 0,
        "compressed": False,
        "size_bytes": 0,
    }


class TestPersistence:
    """Tests for saving and loading persistent namespaces."""

    def test_round_trip(self, store, clock):
        """Test a persistent entry survives into a fresh instance."""
        first = NamespacedCache(store=store, clock=clock)
        first.set("configurations", "product_cleaning", {"price": 45}, ttl=24 * HOUR)
        assert first.flush() == 2

        second = NamespacedCache(store=store, clock=clock)
        assert second.load_persistent() == 1
        assert second.get("configurations", "product_cleaning") == {"price": 45}

    def test_round_trip_through_files(self, tmp_path, clock):
        """Test persistence through the file store."""
        first = NamespacedCache(store=FileStore(str(tmp_path)), clock=clock)
        first.set("product_data", "catalog", ["a", "b"])
        first.destroy()

        second = NamespacedCache(store=FileStore(str(tmp_path)), clock=clock)
        second.init()
        try:
            assert second.get("product_data", "catalog") == ["a", "b"]
        finally:
            second.destroy()

    def test_expired_entries_dropped_on_load(self, store, clock):
        """Test entries older than their TTL are not loaded."""
        payload = [
            ["product_cleaning", _persisted_entry({"price": 45}, clock.now - 25 * HOUR, 24 * HOUR)],
        ]
        store.write("cache_configurations", json.dumps(payload))

        cache = NamespacedCache(store=store, clock=clock)
        assert cache.load_persistent() == 0
        assert cache.get("configurations", "product_cleaning", default="fallback") == "fallback"

    def test_malformed_entries_dropped(self, store, clock):
        """Test entries without timestamp or ttl are skipped."""
        payload = [
            ["no_timestamp", {"value": 1, "ttl": HOUR}],
            ["no_ttl", {"value": 2, "created_at": clock.now}],
            ["not_a_pair"],
            ["good", _persisted_entry(3, clock.now, HOUR)],
        ]
        store.write("cache_configurations", json.dumps(payload))

        cache = NamespacedCache(store=store, clock=clock)
        assert cache.load_persistent() == 1
        assert cache.get("configurations", "good") == 3
        assert cache.size("configurations") == 1

    def test_string_compressed_flag(self, store, clock):
        """Test a "false" string flag is not treated as compressed."""
        user_value = {"compressed": True, "data": "[1]"}
        entry = _persisted_entry(user_value, clock.now, HOUR)
        entry["compressed"] = "false"
        envelope = {"compressed": True, "data": '{"price":45}', "original_size": 12}
        packed = _persisted_entry(envelope, clock.now, HOUR)
        packed["compressed"] = "true"
        store.write(
            "cache_configurations",
            json.dumps([["plain", entry], ["packed", packed]]),
        )

        cache = NamespacedCache(store=store, clock=clock)
        cache.load_persistent()
        assert cache.get("configurations", "plain") == user_value
        assert cache.get("configurations", "packed") == {"price": 45}

    def test_corrupt_payload_skips_namespace(self, store, clock):
        """Test unparsable payload leaves only that namespace empty."""
        store.write("cache_configurations", "{not json")
        store.write(
            "cache_product_data",
            json.dumps([["catalog", _persisted_entry("x", clock.now, HOUR)]]),
        )

        cache = NamespacedCache(store=store, clock=clock)
        assert cache.load_persistent() == 1
        assert cache.size("configurations") == 0
        assert cache.get("product_data", "catalog") == "x"

    def test_load_enforces_capacity(self, store, clock):
        """Test loading more entries than max_size keeps the cap."""
        payload = [
            [f"k{i}", _persisted_entry(i, clock.now + i, HOUR)] for i in range(15)
        ]
        store.write("cache_product_data", json.dumps(payload))

        cache = NamespacedCache(store=store, clock=clock)
        cache.load_persistent()
        assert cache.size("product_data") == 10

    def test_only_persistent_namespaces_saved(self, store, clock):
        """Test non-persistent namespaces never reach the store."""
        cache = NamespacedCache(store=store, clock=clock)
        cache.set("calculations", "a", 1)
        cache.set("configurations", "b", 2)
        cache.flush()

        assert sorted(store.keys()) == ["cache_configurations", "cache_product_data"]

    def test_writes_stay_under_prefix(self, store, clock):
        """Test the cache leaves foreign keys alone."""
        store.write("calculadora_user_preferences", '{"audio": true}')
        config = CacheConfig(storage_prefix="calc_")
        cache = NamespacedCache(config, store=store, clock=clock)
        cache.set("configurations", "b", 2)
        cache.flush()

        assert store.read("calculadora_user_preferences") == '{"audio": true}'
        assert all(
            k.startswith("calc_") for k in store.keys() if k != "calculadora_user_preferences"
        )

    def test_sweep_flushes(self, store, clock):
        """Test a sweep saves persistent namespaces."""
        cache = NamespacedCache(store=store, clock=clock)
        cache.set("configurations", "b", 2)
        cache.sweep()

        assert store.read("cache_configurations") is not None

    def test_unserializable_value_skips_namespace(self, store, clock):
        """Test a namespace that cannot be encoded is skipped for that flush."""
        cache = NamespacedCache(store=store, clock=clock)
        cache.set("configurations", "obj", object())
        cache.set("product_data", "ok", 1)

        assert cache.flush() == 1
        assert store.read("cache_configurations") is None
        assert store.read("cache_product_data") is not None

    def test_compressed_entries_round_trip(self, store, clock):
        """Test compressed entries still decode after reload with compression off."""
        first = NamespacedCache(store=store, clock=clock)
        first.set("configurations", "c", {"nested": [1, 2, 3]})
        first.flush()

        second = NamespacedCache(
            CacheConfig(compression_enabled=False), store=store, clock=clock
        )
        second.load_persistent()
        assert second.get("configurations", "c") == {"nested": [1, 2, 3]}


class TestStorageFailures:
    """Tests for degraded operation when storage fails."""

    def test_unavailable_store(self, clock):
        """Test the cache keeps working in memory when storage is down."""
        store = MemoryStore()
        store.available = False

        cache = NamespacedCache(store=store, clock=clock)
        assert cache.init()
        try:
            cache.set("configurations", "a", 1)
            assert cache.get("configurations", "a") == 1
            assert cache.flush() == 0
        finally:
            cache.destroy()

    def test_quota_exceeded(self, clock):
        """Test rejected writes are reported, not raised."""
        store = MemoryStore(max_value_bytes=10)
        cache = NamespacedCache(store=store, clock=clock)
        cache.set("configurations", "a", "x" * 100)

        assert cache.flush() == 1  # empty product_data still fits
        assert store.read("cache_configurations") is None
        assert store.get_stats().errors == 1

    def test_no_store(self, clock):
        """Test memory-only cache flushes nothing."""
        cache = NamespacedCache(clock=clock)
        cache.set("configurations", "a", 1)

        assert cache.flush() == 0
        assert cache.load_persistent() == 0


class TestLifecycle:
    """Tests for init/destroy."""

    def test_destroy_flushes_once(self, clock):
        """Test destroy is idempotent with a single flush."""
        store = CountingStore()
        cache = NamespacedCache(store=store, clock=clock)
        cache.init()
        cache.set("configurations", "a", 1)

        cache.destroy()
        cache.destroy()

        assert store.write_calls == 2
        assert cache.size("configurations") == 0

    def test_signals_after_destroy_keep_saved_data(self, store, clock):
        """Test suspend, flush and sweep after destroy leave the store intact."""
        cache = NamespacedCache(store=store, clock=clock)
        cache.init()
        cache.set("configurations", "product_cleaning", {"price": 45})
        cache.destroy()
        saved = store.read("cache_configurations")

        assert cache.on_suspend() == 0
        assert cache.flush() == 0
        cache.sweep()
        assert store.read("cache_configurations") == saved

        fresh = NamespacedCache(store=store, clock=clock)
        fresh.load_persistent()
        assert fresh.get("configurations", "product_cleaning") == {"price": 45}

    def test_destroy_stops_sweep_before_flush(self, store, clock):
        """Test the sweep thread has exited when destroy returns."""
        cache = NamespacedCache(CacheConfig(cleanup_interval=0.01), store=store, clock=clock)
        cache.init()
        thread = cache._cleanup_thread
        cache.set("product_data", "p", 1)

        cache.destroy()

        assert not thread.is_alive()
        assert cache._cleanup_thread is None
        assert store.read("cache_product_data") is not None

    def test_init_after_destroy_flushes_again(self, store, clock):
        """Test a re-initialized cache persists again."""
        cache = NamespacedCache(store=store, clock=clock)
        cache.destroy()
        cache.init()
        try:
            cache.set("configurations", "a", 1)
            assert cache.flush() == 2
        finally:
            cache.destroy()

    def test_init_twice(self, store, clock):
        """Test init is a no-op the second time."""
        cache = NamespacedCache(store=store, clock=clock)
        assert cache.init()
        assert cache.init()
        cache.destroy()

    def test_on_suspend_flushes(self, store, clock):
        """Test suspend hook saves persistent namespaces."""
        cache = NamespacedCache(store=store, clock=clock)
        cache.set("product_data", "p", {"sku": 1})

        assert cache.on_suspend() == 2
        assert "cache_product_data" in store

    def test_uptime_after_init(self, store, clock):
        """Test uptime is measured from init."""
        cache = NamespacedCache(store=store, clock=clock)
        cache.init()
        try:
            clock.advance(30)
            assert cache.get_statistics()["uptime_seconds"] == pytest.approx(30)
        finally:
            cache.destroy()


class TestExportImport:
    """Tests for bulk export and import."""

    def test_export_contents(self, cache):
        """Test export lists entries and statistics."""
        cache.set("calculations", "a", 1)
        cache.get("calculations", "a")

        exported = cache.export_all()

        assert set(exported["namespaces"]) == set(cache.namespaces)
        key, entry = exported["namespaces"]["calculations"][0]
        assert key == "a"
        assert entry["hit_count"] == 1
        assert exported["statistics"]["hits"] == 1
        assert "exported_at" in exported

    def test_import_replaces_named_namespaces(self, clock):
        """Test import touches only the namespaces in the payload."""
        source = NamespacedCache(clock=clock)
        source.set("calculations", "a", 1)

        target = NamespacedCache(clock=clock)
        target.set("calculations", "old", 0)
        target.set("projections", "keep", 2)

        exported = source.export_all()
        payload = {"namespaces": {"calculations": exported["namespaces"]["calculations"]}}

        assert target.import_all(payload)
        assert target.get("calculations", "a") == 1
        assert target.get("calculations", "old") is None
        assert target.get("projections", "keep") == 2

    def test_import_revalidates_ttl(self, clock):
        """Test expired entries in the payload are dropped."""
        cache = NamespacedCache(clock=clock)
        payload = {
            "namespaces": {
                "calculations": [
                    ["stale", _persisted_entry(1, clock.now - 2 * HOUR, HOUR)],
                    ["fresh", _persisted_entry(2, clock.now, HOUR)],
                ],
                "unknown": [],
            }
        }

        assert cache.import_all(payload)
        assert cache.size("calculations") == 1
        assert cache.get("calculations", "fresh") == 2

    def test_import_rejects_bad_payload(self, cache):
        """Test payload without namespaces is refused."""
        assert not cache.import_all({})
        assert not cache.import_all({"namespaces": []})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
