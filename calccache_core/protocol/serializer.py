"""CalcCache Serializer - Value Serialization and Compression Envelope.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import base64
import json
import logging
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class CompressionType(Enum):
    """Compression types."""

    ENVELOPE = "envelope"   # Normalized JSON text, no byte reduction
    ZLIB = "zlib"           # zlib-compressed JSON, base64 encoded


@dataclass
class EncodedValue:
    """Encoded value container.

    Attributes:
        stored: Form kept in the entry
        compressed: Whether stored is a compression envelope
        size_bytes: Approximate serialized size
    """

    stored: Any
    compressed: bool = False
    size_bytes: int = 0


class Serializer(ABC):
    """Abstract serializer for cache values."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""
        pass

    @abstractmethod
    def serialize(self, value: Any) -> str:
        """Serialize value to text.

        Args:
            value: Value to serialize

        Returns:
            Serialized text
        """
        pass

    @abstractmethod
    def deserialize(self, data: str) -> Any:
        """Deserialize text to value.

        Args:
            data: Serialized text

        Returns:
            Deserialized value
        """
        pass


class JSONSerializer(Serializer):
    """JSON serializer.

    Values must be JSON-compatible; anything else raises so the caller
    can fall back to storing the raw value.
    """

    @property
    def format_name(self) -> str:
        return "json"

    def serialize(self, value: Any) -> str:
        return json.dumps(value, separators=(",", ":"), allow_nan=False)

    def deserialize(self, data: str) -> Any:
        return json.loads(data)


class ValueCodec:
    """Encodes entry values into a symmetric compression envelope.

    The envelope is a plain dict so it can be persisted as JSON along
    with the rest of the entry. Decoding only depends on the envelope
    itself, so entries written with compression on still decode after
    compression is switched off.

    Example:
        codec = ValueCodec()
        encoded = codec.encode({"price": 45}, compress=True)
        codec.decode(encoded.stored)  # {"price": 45}
    """

    def __init__(
        self,
        serializer: Optional[Serializer] = None,
        compression: CompressionType = CompressionType.ENVELOPE,
    ):
        """Initialize codec.

        Args:
            serializer: Text serializer
            compression: Compression type used when compressing
        """
        self.serializer = serializer or JSONSerializer()
        self.compression = compression

    def size_of(self, value: Any) -> int:
        """Approximate size in bytes (two bytes per character)."""
        try:
            return len(self.serializer.serialize(value)) * 2
        except (TypeError, ValueError):
            return 0

    def encode(self, value: Any, compress: bool = True) -> EncodedValue:
        """Encode a value for storage.

        Args:
            value: Value to encode
            compress: Wrap value in a compression envelope

        Returns:
            EncodedValue; the raw value uncompressed if it cannot be
            serialized or would not decode back to an equal value
        """
        try:
            text = self.serializer.serialize(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to serialize value, storing raw: {e}")
            return EncodedValue(stored=value, compressed=False, size_bytes=0)

        size_bytes = len(text) * 2
        if not compress:
            return EncodedValue(stored=value, compressed=False, size_bytes=size_bytes)

        # tuples and non-str dict keys do not survive a JSON round trip
        if self.serializer.deserialize(text) != value:
            logger.debug("Value does not round-trip through JSON, storing raw")
            return EncodedValue(stored=value, compressed=False, size_bytes=size_bytes)

        if self.compression == CompressionType.ZLIB:
            packed = base64.b64encode(zlib.compress(text.encode("utf-8"))).decode("ascii")
            envelope = {
                "compressed": True,
                "codec": CompressionType.ZLIB.value,
                "data": packed,
                "original_size": len(text),
            }
        else:
            envelope = {
                "compressed": True,
                "data": text,
                "original_size": len(text),
            }

        return EncodedValue(stored=envelope, compressed=True, size_bytes=size_bytes)

    def decode(self, stored: Any) -> Any:
        """Decode a stored envelope.

        Args:
            stored: Stored form

        Returns:
            Original value, or stored unchanged if it cannot be decoded
        """
        if not isinstance(stored, dict) or not stored.get("compressed"):
            return stored

        try:
            data = stored["data"]
            if stored.get("codec") == CompressionType.ZLIB.value:
                data = zlib.decompress(base64.b64decode(data)).decode("utf-8")
            return self.serializer.deserialize(data)
        except (KeyError, TypeError, ValueError, zlib.error) as e:
            logger.warning(f"Failed to decompress value: {e}")
            return stored


__all__ = [
    "Serializer",
    "JSONSerializer",
    "CompressionType",
    "EncodedValue",
    "ValueCodec",
]
