"""Protocol module - Value serialization."""

from calccache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    CompressionType,
    EncodedValue,
    ValueCodec,
)

__all__ = [
    "Serializer",
    "JSONSerializer",
    "CompressionType",
    "EncodedValue",
    "ValueCodec",
]
