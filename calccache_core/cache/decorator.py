"""CalcCache Decorators - Memoizing Functions into a Namespace.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar

from calccache_core.cache.keys import derive_key

if TYPE_CHECKING:
    from calccache_core.cache.cache import NamespacedCache

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _make_key(
    func: Callable,
    args: tuple,
    kwargs: dict,
    key_builder: Optional[Callable[..., Any]] = None,
) -> str:
    """Build cache key from a function call.

    Args:
        func: Function being cached
        args: Positional arguments
        kwargs: Keyword arguments
        key_builder: Custom builder returning lookup parameters

    Returns:
        Cache key string
    """
    if key_builder:
        return derive_key(key_builder(*args, **kwargs))

    return derive_key({
        "func": f"{func.__module__}.{func.__qualname__}",
        "args": list(args),
        "kwargs": kwargs,
    })


def cached(
    cache: "NamespacedCache",
    namespace: str,
    ttl: Optional[float] = None,
    key_builder: Optional[Callable[..., Any]] = None,
) -> Callable[[F], F]:
    """Decorator to memoize function results in a cache namespace.

    A ``None`` result is returned but never cached.

    Args:
        cache: Cache instance
        namespace: Target namespace
        ttl: TTL in seconds (None = namespace default)
        key_builder: Maps call arguments to lookup parameters

    Returns:
        Decorated function

    Example:
        @cached(cache, "projections", ttl=600)
        def project(monthly: float, years: int) -> dict:
            return build_projection(monthly, years)

        @cached(cache, "calculations",
                key_builder=lambda s: {"cleaning_products": s["cleaning_products"],
                                       "water_consumption": s["water_consumption"]})
        def calculate(selections: dict) -> dict:
            return calculate_expenses(selections)
    """
    def decorator(func: F) -> F:
        missing = object()

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = _make_key(func, args, kwargs, key_builder=key_builder)

            cached_value = cache.get(namespace, cache_key, missing)
            if cached_value is not missing:
                return cached_value

            result = func(*args, **kwargs)
            if result is not None:
                cache.set(namespace, cache_key, result, ttl=ttl)
            return result

        def cache_key(*args, **kwargs) -> str:
            """Get cache key for arguments."""
            return _make_key(func, args, kwargs, key_builder=key_builder)

        def cache_invalidate(*args, **kwargs) -> bool:
            """Drop the cached result for arguments."""
            return cache.remove(namespace, cache_key(*args, **kwargs))

        wrapper.cache_key = cache_key
        wrapper.cache_invalidate = cache_invalidate
        wrapper.cache = cache
        wrapper.__wrapped__ = func

        return wrapper  # type: ignore

    return decorator


__all__ = ["cached"]
