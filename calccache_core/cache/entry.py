"""CalcCache Entry - Cache Entry with TTL and Hit Metadata.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

# Each recorded hit pushes the synthetic access time forward by this many seconds
HIT_WEIGHT_SECONDS = 1.0


class MalformedEntryError(ValueError):
    """Raised when a persisted entry is missing required fields."""


def _as_flag(value: Any) -> bool:
    """Read a persisted boolean, accepting "true"/"false" strings."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


@dataclass
class CacheEntry:
    """A memoized value with expiry and hit metadata.

    Attributes:
        key: Derived cache key
        value: Stored value (possibly a compression envelope)
        created_at: Insertion timestamp (epoch seconds)
        ttl_seconds: Time to live in seconds
        hit_count: Successful reads since insertion
        compressed: Whether value is a compression envelope
        size_bytes: Approximate serialized size
    """

    key: str
    value: Any
    created_at: float
    ttl_seconds: float
    hit_count: int = 0
    compressed: bool = False
    size_bytes: int = 0

    def age(self, now: Optional[float] = None) -> float:
        """Get entry age in seconds."""
        if now is None:
            now = time.time()
        return now - self.created_at

    def is_valid(self, now: Optional[float] = None) -> bool:
        """Check if entry is still within its TTL."""
        return self.age(now) < self.ttl_seconds

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check if entry has expired."""
        return not self.is_valid(now)

    @property
    def expires_at(self) -> float:
        """Get expiration timestamp."""
        return self.created_at + self.ttl_seconds

    @property
    def synthetic_access_time(self) -> float:
        """Approximate last access time used for eviction ordering."""
        return self.created_at + self.hit_count * HIT_WEIGHT_SECONDS

    def touch(self) -> None:
        """Record a hit."""
        self.hit_count += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted dictionary form.

        Returns:
            Dictionary representation (key excluded)
        """
        return {
            "value": self.value,
            "created_at": self.created_at,
            "ttl": self.ttl_seconds,
            "hit_count": self.hit_count,
            "compressed": self.compressed,
            "size_bytes": self.size_bytes,
        }

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> "CacheEntry":
        """Create from the persisted dictionary form.

        Args:
            key: Cache key the entry was stored under
            data: Dictionary data

        Returns:
            CacheEntry instance

        Raises:
            MalformedEntryError: If required fields are missing or invalid
        """
        if not isinstance(key, str) or not isinstance(data, dict):
            raise MalformedEntryError(f"Entry for {key!r} is not a mapping")

        try:
            created_at = float(data["created_at"])
            ttl = float(data["ttl"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedEntryError(f"Entry {key!r} lacks timestamp or ttl: {e}") from e

        if "value" not in data:
            raise MalformedEntryError(f"Entry {key!r} has no value")

        try:
            hit_count = int(data.get("hit_count", 0))
            size_bytes = int(data.get("size_bytes", 0))
        except (TypeError, ValueError) as e:
            raise MalformedEntryError(f"Entry {key!r} has bad metadata: {e}") from e

        return cls(
            key=key,
            value=data["value"],
            created_at=created_at,
            ttl_seconds=ttl,
            hit_count=hit_count,
            compressed=_as_flag(data.get("compressed", False)),
            size_bytes=size_bytes,
        )

    def __repr__(self) -> str:
        return (
            f"CacheEntry(key={self.key!r}, ttl={self.ttl_seconds}s, "
            f"hits={self.hit_count})"
        )


__all__ = ["CacheEntry", "MalformedEntryError", "HIT_WEIGHT_SECONDS"]
