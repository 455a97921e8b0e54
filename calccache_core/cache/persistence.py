"""CalcCache Persistence - Saving Namespaces to a Durable Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from calccache_core.store.backend import DurableStore

logger = logging.getLogger(__name__)

Pairs = List[Tuple[str, Dict[str, Any]]]


class NamespacePersistence:
    """Reads and writes namespace payloads under a reserved key prefix.

    Each namespace is stored as JSON text: a list of ``[key, entry]``
    pairs. Every failure is logged and reported through the return
    value, never raised.

    Example:
        persistence = NamespacePersistence(MemoryStore(), prefix="cache_")
        persistence.save("configurations", [("product_a", entry.to_dict())])
        pairs = persistence.load("configurations")
    """

    def __init__(self, store: DurableStore, prefix: str = "cache_"):
        """Initialize persistence.

        Args:
            store: Durable key/value store
            prefix: Reserved key prefix
        """
        self.store = store
        self.prefix = prefix

    def storage_key(self, namespace: str) -> str:
        return f"{self.prefix}{namespace}"

    def save(self, namespace: str, pairs: Pairs) -> bool:
        """Save one namespace.

        Args:
            namespace: Namespace name
            pairs: Persisted ``(key, entry)`` pairs

        Returns:
            True if written
        """
        try:
            payload = json.dumps([[key, entry] for key, entry in pairs])
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to serialize namespace {namespace}: {e}")
            return False

        try:
            written = self.store.write(self.storage_key(namespace), payload)
        except Exception as e:
            logger.warning(f"Failed to save namespace {namespace}: {e}")
            return False

        if not written:
            logger.warning(f"Durable store rejected namespace {namespace}")
            return False

        logger.debug(f"Saved {len(pairs)} entries for namespace {namespace}")
        return True

    def load(self, namespace: str) -> Optional[List[Any]]:
        """Load one namespace.

        Args:
            namespace: Namespace name

        Returns:
            Raw persisted items, or None if absent or unreadable
        """
        try:
            payload = self.store.read(self.storage_key(namespace))
        except Exception as e:
            logger.warning(f"Failed to load namespace {namespace}: {e}")
            return None

        if payload is None:
            return None

        try:
            data = json.loads(payload)
        except ValueError as e:
            logger.warning(f"Corrupt payload for namespace {namespace}: {e}")
            return None

        if not isinstance(data, list):
            logger.warning(f"Corrupt payload for namespace {namespace}: not a list")
            return None

        return data


__all__ = ["NamespacePersistence"]
