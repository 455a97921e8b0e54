"""CalcCache Warmup - Pre-computing Common Calculations.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional

from calccache_core.cache.calculations import CALCULATIONS, selection_key

if TYPE_CHECKING:
    from calccache_core.cache.cache import NamespacedCache

logger = logging.getLogger(__name__)

COMMON_COMBINATIONS: List[Dict[str, str]] = [
    {"cleaning_products": "standard", "water_consumption": "medium"},
    {"cleaning_products": "basic", "water_consumption": "low"},
    {"cleaning_products": "premium", "water_consumption": "high"},
    {"cleaning_products": "standard", "water_consumption": "low"},
    {"cleaning_products": "basic", "water_consumption": "medium"},
]


@dataclass
class WarmupStats:
    """Outcome of one warmup run.

    ``failed`` counts combinations the calculator raised on or returned
    nothing for; ``skipped`` counts those already cached.
    """

    combinations: int = 0
    warmed: int = 0
    failed: int = 0
    skipped: int = 0
    elapsed: float = 0.0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        attempted = self.warmed + self.failed
        return self.warmed / attempted if attempted else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "combinations": self.combinations,
            "warmed": self.warmed,
            "failed": self.failed,
            "skipped": self.skipped,
            "elapsed": self.elapsed,
            "success_rate": self.success_rate,
        }


class CacheWarmer:
    """Fills the calculations namespace ahead of user requests.

    Example:
        warmer = CacheWarmer(cache)
        stats = warmer.warm_calculations(calculator.calculate_expenses)
    """

    def __init__(self, cache: "NamespacedCache", namespace: str = CALCULATIONS):
        """Initialize warmer.

        Args:
            cache: Cache to warm
            namespace: Namespace receiving results
        """
        self.cache = cache
        self.namespace = namespace
        self._stats = WarmupStats()

    def warm_calculations(
        self,
        calculate: Callable[[Mapping[str, Any]], Any],
        combinations: Iterable[Mapping[str, Any]] = COMMON_COMBINATIONS,
        ttl: Optional[float] = None,
        skip_existing: bool = True,
    ) -> WarmupStats:
        """Compute and cache results for selection combinations.

        Args:
            calculate: Calculator invoked with each combination
            combinations: Selection combinations to warm
            ttl: TTL for warmed entries
            skip_existing: Skip combinations already cached

        Returns:
            Warmup statistics
        """
        combinations = list(combinations)
        self._stats = WarmupStats(
            combinations=len(combinations),
            started_at=datetime.now(),
        )

        logger.info(f"Warming {self.namespace} with {len(combinations)} combinations")

        for combination in combinations:
            key = selection_key(combination)

            if skip_existing and self.cache.exists(self.namespace, key):
                self._stats.skipped += 1
                continue

            try:
                result = calculate(combination)
            except Exception as e:
                logger.warning(f"Failed to warm up combination {dict(combination)}: {e}")
                self._stats.failed += 1
                continue

            if result is None:
                self._stats.failed += 1
                continue

            self.cache.set(self.namespace, key, result, ttl=ttl)
            self._stats.warmed += 1

        self._stats.completed_at = datetime.now()
        self._stats.elapsed = (
            self._stats.completed_at - self._stats.started_at
        ).total_seconds()

        logger.info(
            f"Warmup completed: {self._stats.warmed} warmed, "
            f"{self._stats.failed} failed, {self._stats.skipped} skipped"
        )

        return self._stats

    def get_stats(self) -> WarmupStats:
        """Get statistics of the last warmup."""
        return self._stats


__all__ = ["CacheWarmer", "WarmupStats", "COMMON_COMBINATIONS"]
