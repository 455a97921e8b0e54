"""CalcCache Keys - Deterministic Cache Key Derivation.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Keys are hashed with a fast 32-bit rolling hash. It is not collision
resistant; lookup parameters are expected to be small, well-typed
combinations (e.g. a pair of enum values).
"""

from __future__ import annotations

import json
from typing import Any

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_int32(value: int) -> int:
    """Wrap an integer to a signed 32-bit value."""
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


def hash_string(text: str) -> str:
    """Hash text with a polynomial rolling hash (multiplier 31).

    Iterates over UTF-16 code units so non-BMP characters hash as
    surrogate pairs.

    Args:
        text: Text to hash

    Returns:
        Absolute 32-bit hash in radix 36
    """
    h = 0
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        h = _to_int32((h << 5) - h + code_unit)
    return _to_base36(abs(h))


def canonical_json(params: Any) -> str:
    """Serialize params with sorted keys and compact separators."""
    return json.dumps(
        params,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def derive_key(params: Any) -> str:
    """Derive a cache key from lookup parameters.

    Strings are used verbatim. Anything else is serialized
    deterministically and hashed, so mappings with the same fields in a
    different construction order produce the same key.

    Args:
        params: Lookup parameters

    Returns:
        Cache key
    """
    if isinstance(params, str):
        return params
    return hash_string(canonical_json(params))


__all__ = ["derive_key", "hash_string", "canonical_json"]
