"""CalcCache Calculations - Domain Helpers for the Expense Calculator.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from calccache_core.cache.cache import NamespacedCache

CALCULATIONS = "calculations"
CONFIGURATIONS = "configurations"
USER_SELECTIONS = "user_selections"
PROJECTIONS = "projections"
RECOMMENDATIONS = "recommendations"


def selection_key(selections: Mapping[str, Any]) -> Dict[str, Any]:
    """Reduce a selection mapping to the fields a calculation depends on."""
    return {
        "cleaning_products": selections.get("cleaning_products"),
        "water_consumption": selections.get("water_consumption"),
    }


class CalculationCache:
    """Typed accessors over the calculator's namespaces.

    Example:
        calc_cache = CalculationCache(cache)
        calc_cache.cache_product_config("cleaning", {"price": 45})
        calc_cache.get_cached_product_config("cleaning")  # {"price": 45}
    """

    def __init__(self, cache: "NamespacedCache"):
        self.cache = cache

    def cache_calculation(self, selections: Mapping[str, Any], result: Any) -> bool:
        return self.cache.set(CALCULATIONS, selection_key(selections), result)

    def get_cached_calculation(self, selections: Mapping[str, Any]) -> Optional[Any]:
        return self.cache.get(CALCULATIONS, selection_key(selections))

    def cache_product_config(self, category: str, config: Any) -> bool:
        return self.cache.set(CONFIGURATIONS, f"product_{category}", config)

    def get_cached_product_config(self, category: str) -> Optional[Any]:
        return self.cache.get(CONFIGURATIONS, f"product_{category}")

    def cache_user_selection(self, selection_id: str, data: Any) -> bool:
        return self.cache.set(USER_SELECTIONS, selection_id, data)

    def get_cached_user_selection(self, selection_id: str) -> Optional[Any]:
        return self.cache.get(USER_SELECTIONS, selection_id)

    def cache_projection(self, params: Any, projection: Any) -> bool:
        return self.cache.set(PROJECTIONS, params, projection)

    def get_cached_projection(self, params: Any) -> Optional[Any]:
        return self.cache.get(PROJECTIONS, params)

    def cache_recommendation(self, calculation_hash: str, recommendation: Any) -> bool:
        return self.cache.set(RECOMMENDATIONS, calculation_hash, recommendation)

    def get_cached_recommendation(self, calculation_hash: str) -> Optional[Any]:
        return self.cache.get(RECOMMENDATIONS, calculation_hash)

    def __repr__(self) -> str:
        return f"CalculationCache(cache={self.cache!r})"


__all__ = ["CalculationCache", "selection_key"]
