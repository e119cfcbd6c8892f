import gzip

import pytest

from loghorizon.compress import GzipCompressor


def test_round_trip():
    compressor = GzipCompressor()
    data = b"some log message " * 50
    assert compressor.decompress(compressor.compress(data)) == data


def test_round_trip_empty():
    compressor = GzipCompressor()
    assert compressor.decompress(compressor.compress(b"")) == b""


def test_output_is_gzip_stream():
    compressed = GzipCompressor().compress(b"hello")
    assert compressed[:2] == b"\x1f\x8b"
    assert gzip.decompress(compressed) == b"hello"


def test_compression_is_deterministic():
    compressor = GzipCompressor()
    first = compressor.compress(b"abc")
    second = compressor.compress(b"abc")
    assert first == second
    assert gzip.decompress(first) == b"abc"


def test_repetitive_data_shrinks():
    data = b"x" * 10_000
    assert len(GzipCompressor().compress(data)) < len(data)


def test_default_level_is_best_compression():
    assert GzipCompressor().level == 9


def test_invalid_level_rejected():
    with pytest.raises(ValueError):
        GzipCompressor(level=10)


def test_decompress_invalid_data_raises():
    with pytest.raises(OSError):
        GzipCompressor().decompress(b"not gzip data at all")


def test_decompress_truncated_data_raises():
    compressed = GzipCompressor().compress(b"a longer message to truncate")
    with pytest.raises((EOFError, OSError)):
        GzipCompressor().decompress(compressed[:-6])