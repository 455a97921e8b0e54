"""CalcCache Storage Backend - Abstract Durable Key/Value Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

logger = logging.getLogger(__name__)


class StorageUnavailableError(RuntimeError):
    """Raised when a durable store cannot be reached."""


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of read operations
        writes: Number of write operations
        deletes: Number of delete operations
        errors: Number of errors
        last_error: Message of the last error
        last_error_at: When the last error happened
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class DurableStore(ABC):
    """Abstract durable key/value store holding text payloads.

    The store may be shared with the rest of the host application, so
    the cache only ever touches keys under its own reserved prefix.

    Implementations:
    - MemoryStore: In-process dictionary
    - FileStore: One file per key
    - RedisStore: Redis strings

    ``write`` returns False on failure; ``read`` may raise when the
    backend is unavailable.
    """

    def __init__(self):
        self._stats = StorageStats()

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Read payload by key.

        Args:
            key: Storage key

        Returns:
            Payload text or None if absent
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> bool:
        """Write payload.

        Args:
            key: Storage key
            value: Payload text

        Returns:
            True if successful
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete payload.

        Args:
            key: Storage key

        Returns:
            True if deleted
        """
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """List keys starting with prefix.

        Args:
            prefix: Key prefix

        Returns:
            List of keys
        """
        pass

    def get_stats(self) -> StorageStats:
        """Get storage statistics."""
        return self._stats

    def health_check(self) -> bool:
        """Check storage health with a write/read/delete round trip.

        Returns:
            True if healthy
        """
        test_key = "__storage_test__"
        try:
            if not self.write(test_key, "test"):
                return False
            result = self.read(test_key)
            self.delete(test_key)
            return result == "test"
        except Exception as e:
            logger.warning(f"Storage health check failed: {e}")
            return False

    def __contains__(self, key: str) -> bool:
        return self.read(key) is not None


__all__ = ["DurableStore", "StorageStats", "StorageUnavailableError"]
