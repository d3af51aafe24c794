"""Unit tests for gzip payload compression."""

import gzip

import pytest

from s3export.core.errors import CompressionError, ErrorCode
from s3export.storage import compression
from s3export.storage.compression import gzip_compress


class _BrokenGzipFile:
    def __init__(self, *args, **kwargs):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False

    def write(self, data):
        raise OSError("No space left on device")


class TestGzipCompress:
    """Tests for gzip_compress."""

    def test_round_trip(self, payload):
        result = gzip_compress(payload)
        assert result.is_ok()
        assert gzip.decompress(result.unwrap()) == payload

    def test_has_gzip_magic(self, payload):
        body = gzip_compress(payload).unwrap()
        assert body[:2] == b"\x1f\x8b"

    def test_repetitive_payload_shrinks(self, payload):
        assert len(gzip_compress(payload).unwrap()) < len(payload)

    def test_empty_payload_is_valid_stream(self):
        body = gzip_compress(b"").unwrap()
        assert body
        assert gzip.decompress(body) == b""

    def test_binary_payload(self):
        data = bytes(range(256)) * 4
        assert gzip.decompress(gzip_compress(data).unwrap()) == data

    def test_write_failure_is_compression_error(self, monkeypatch, payload):
        monkeypatch.setattr(compression.gzip, "GzipFile", _BrokenGzipFile)

        result = gzip_compress(payload)

        assert result.is_err()
        err = result.error
        assert isinstance(err, CompressionError)
        assert err.code is ErrorCode.COMPRESSION_FAILED
        assert isinstance(err.cause, OSError)
        assert err.context["size_bytes"] == len(payload)

    def test_unwrap_on_failure_raises_the_error(self, monkeypatch):
        monkeypatch.setattr(compression.gzip, "GzipFile", _BrokenGzipFile)
        with pytest.raises(CompressionError):
            gzip_compress(b"abc").unwrap()
