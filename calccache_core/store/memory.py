"""CalcCache Memory Store - In-Memory Durable Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from calccache_core.store.backend import DurableStore, StorageUnavailableError

logger = logging.getLogger(__name__)


class MemoryStore(DurableStore):
    """In-memory durable store.

    Survives cache instances but not the process. Useful for tests and
    for hosts that hand one store to successive cache instances.

    Example:
        store = MemoryStore()
        store.write("cache_configurations", "[]")
        store.read("cache_configurations")
    """

    def __init__(self, max_value_bytes: Optional[int] = None):
        """Initialize memory store.

        Args:
            max_value_bytes: Reject payloads larger than this (quota)
        """
        super().__init__()
        self.max_value_bytes = max_value_bytes
        self.available = True
        self._data: Dict[str, str] = {}
        self._lock = threading.RLock()

    def _check_available(self) -> None:
        if not self.available:
            raise StorageUnavailableError("Memory store is unavailable")

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            self._check_available()
            self._stats.reads += 1
            return self._data.get(key)

    def write(self, key: str, value: str) -> bool:
        try:
            with self._lock:
                self._check_available()
                if self.max_value_bytes is not None and len(value) > self.max_value_bytes:
                    raise ValueError(f"Payload for {key} exceeds quota")
                self._data[key] = value
                self._stats.writes += 1
                return True

        except (StorageUnavailableError, ValueError) as e:
            self._stats.record_error(str(e))
            return False

    def delete(self, key: str) -> bool:
        with self._lock:
            if key in self._data:
                del self._data[key]
                self._stats.deletes += 1
                return True
            return False

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return [k for k in self._data if k.startswith(prefix)]

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryStore(keys={len(self._data)})"


__all__ = ["MemoryStore"]
