"""CalcCache File Store - File-Based Durable Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from pathlib import Path
from typing import List, Optional

from calccache_core.store.backend import DurableStore

logger = logging.getLogger(__name__)


class FileStore(DurableStore):
    """File-based durable store.

    Persists each key to its own file so payloads survive restarts.
    Filenames are hashes of the key; the original key is kept in a
    small JSON wrapper so keys can be listed.

    Features:
    - Persistent storage
    - Atomic writes (temp file + rename)
    - Safe filenames for arbitrary keys

    Example:
        store = FileStore("/var/cache/calccache")
        store.write("cache_configurations", "[]")
        payload = store.read("cache_configurations")
    """

    SUFFIX = ".json"

    def __init__(self, base_path: str):
        """Initialize file store.

        Args:
            base_path: Directory for payload files
        """
        super().__init__()
        self.base_path = Path(base_path)
        self._lock = threading.RLock()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        """Get file path for key."""
        filename = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.base_path / f"{filename}{self.SUFFIX}"

    def read(self, key: str) -> Optional[str]:
        path = self._get_path(key)

        with self._lock:
            self._stats.reads += 1
            if not path.exists():
                return None

            try:
                wrapper = json.loads(path.read_text(encoding="utf-8"))
                return wrapper["value"]
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.error(f"Error reading {key}: {e}")
                self._stats.record_error(str(e))
                raise

    def write(self, key: str, value: str) -> bool:
        path = self._get_path(key)
        temp_path = path.with_suffix(".tmp")

        try:
            with self._lock:
                temp_path.write_text(
                    json.dumps({"key": key, "value": value}),
                    encoding="utf-8",
                )
                temp_path.replace(path)
                self._stats.writes += 1
                return True

        except OSError as e:
            logger.error(f"Error writing {key}: {e}")
            self._stats.record_error(str(e))

            if temp_path.exists():
                temp_path.unlink()

            return False

    def delete(self, key: str) -> bool:
        path = self._get_path(key)

        try:
            with self._lock:
                if path.exists():
                    path.unlink()
                    self._stats.deletes += 1
                    return True
                return False

        except OSError as e:
            logger.error(f"Error deleting {key}: {e}")
            self._stats.record_error(str(e))
            return False

    def keys(self, prefix: str = "") -> List[str]:
        """List keys starting with prefix.

        Note: reads every payload file to recover its key.
        """
        keys = []

        with self._lock:
            for file_path in self.base_path.glob(f"*{self.SUFFIX}"):
                try:
                    key = json.loads(file_path.read_text(encoding="utf-8"))["key"]
                except (OSError, ValueError, KeyError, TypeError):
                    continue
                if key.startswith(prefix):
                    keys.append(key)

        return keys

    def __repr__(self) -> str:
        return f"FileStore(path={self.base_path})"


__all__ = ["FileStore"]
