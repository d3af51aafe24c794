"""
Payload compression for uploads.

Bodies are gzip-framed (RFC 1952) into an in-memory sink. The compressor
is closed before the bytes are read back so the trailing CRC/size frame
is always present.
"""

from __future__ import annotations

import gzip
import io
import zlib

from s3export.core.errors import CompressionError
from s3export.core.types import Result, Ok, Err


def gzip_compress(data: bytes) -> Result[bytes, CompressionError]:
    """
    Compress a payload with gzip framing.

    Returns:
        Ok(compressed bytes), or Err(CompressionError) if the compressor
        write or close fails.
    """
    sink = io.BytesIO()
    try:
        with gzip.GzipFile(fileobj=sink, mode="wb") as gz:
            gz.write(data)
    except (OSError, ValueError, zlib.error) as e:
        return Err(CompressionError.write_failed(len(data), cause=e))
    return Ok(sink.getvalue())
