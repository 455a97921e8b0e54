"""Tests for value serialization and the compression envelope.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from calccache_core.protocol.serializer import (
    CompressionType,
    JSONSerializer,
    ValueCodec,
)


class TestJSONSerializer:
    """Tests for JSON serializer."""

    def test_compact(self):
        """Test output has no whitespace."""
        assert JSONSerializer().serialize({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_rejects_nan(self):
        """Test NaN is not silently serialized."""
        with pytest.raises(ValueError):
            JSONSerializer().serialize(float("nan"))


class TestValueCodec:
    """Tests for the value codec."""

    def test_envelope(self):
        """Test default envelope keeps JSON text."""
        codec = ValueCodec()
        encoded = codec.encode({"price": 45}, compress=True)

        assert encoded.compressed
        assert encoded.stored == {
            "compressed": True,
            "data": '{"price":45}',
            "original_size": 12,
        }
        assert encoded.size_bytes == 24
        assert codec.decode(encoded.stored) == {"price": 45}

    def test_zlib(self):
        """Test zlib envelope decodes to the original value."""
        codec = ValueCodec(compression=CompressionType.ZLIB)
        value = {"rows": ["standard"] * 50}
        encoded = codec.encode(value, compress=True)

        assert encoded.stored["codec"] == "zlib"
        assert len(encoded.stored["data"]) < encoded.stored["original_size"]
        assert codec.decode(encoded.stored) == value

    def test_zlib_envelope_decodes_with_envelope_codec(self):
        """Test decoding depends on the envelope, not codec settings."""
        encoded = ValueCodec(compression=CompressionType.ZLIB).encode([1, 2, 3])

        assert ValueCodec().decode(encoded.stored) == [1, 2, 3]

    def test_uncompressed(self):
        """Test compress=False stores the raw value."""
        value = {"price": 45}
        encoded = ValueCodec().encode(value, compress=False)

        assert not encoded.compressed
        assert encoded.stored is value
        assert encoded.size_bytes == 24

    def test_unserializable_stored_raw(self):
        """Test values JSON cannot encode are kept as-is."""
        value = object()
        encoded = ValueCodec().encode(value, compress=True)

        assert not encoded.compressed
        assert encoded.stored is value
        assert encoded.size_bytes == 0

    @pytest.mark.parametrize(
        "value",
        [
            (1, 2),
            {1: 100, 5: 500},
            {"rows": [("basic", 20)]},
        ],
    )
    def test_lossy_values_stored_raw(self, value):
        """Test values JSON would alter are kept as-is and come back equal."""
        codec = ValueCodec()
        encoded = codec.encode(value, compress=True)

        assert not encoded.compressed
        assert encoded.stored is value
        assert encoded.size_bytes > 0
        assert codec.decode(encoded.stored) == value

    def test_broken_envelope_returned_unchanged(self):
        """Test a damaged envelope is handed back rather than raising."""
        broken = {"compressed": True, "data": "{not json"}

        assert ValueCodec().decode(broken) is broken

    def test_broken_zlib_envelope(self):
        """Test bad zlib data is handed back rather than raising."""
        broken = {"compressed": True, "codec": "zlib", "data": "bm90IHpsaWI="}

        assert ValueCodec().decode(broken) is broken

    def test_plain_dict_not_decoded(self):
        """Test dicts without the envelope marker pass through."""
        value = {"data": "x"}

        assert ValueCodec().decode(value) is value

    def test_size_of(self):
        """Test size is two bytes per serialized character."""
        codec = ValueCodec()

        assert codec.size_of("abc") == 10  # '"abc"'
        assert codec.size_of(object()) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
