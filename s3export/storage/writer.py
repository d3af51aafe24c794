"""
S3 Buffer Writer
================

Persists one in-memory telemetry batch as one S3 object.

Write Path:
-----------
1. Capture the current time and build the object key
2. Optionally gzip the buffer in memory
3. Build an authenticated session (optionally assuming a role)
4. Issue a single put_object with the (possibly compressed) body

Failure Semantics:
------------------
Each step returns a Result. The first Err is returned to the caller
unchanged; there is no retry and no cleanup. Either the object is fully
written or nothing is.

| Stage        | Error              |
|--------------|--------------------|
| compression  | CompressionError   |
| session      | SessionError       |
| put_object   | UploadError        |

Concurrency:
------------
- Every call builds its own key, session and body
- The optional timeout bounds the put_object call only; compression and
  session construction do not observe it

Author: Planetary AI Systems
License: MIT
"""

from __future__ import annotations

import asyncio
import contextlib
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from botocore.exceptions import BotoCoreError

from s3export.core import constants as C
from s3export.core.errors import (
    CompressionError,
    ExportError,
    SessionError,
    UploadError,
)
from s3export.core.types import Result, Ok, Err
from s3export.observability.logging import StructuredLogger
from s3export.storage.compression import gzip_compress
from s3export.storage.config import Compression, S3UploaderConfig
from s3export.storage.keys import build_key
from s3export.storage.session import S3Session, create_session

SessionFactory = Callable[[S3UploaderConfig], Awaitable[Result[S3Session, SessionError]]]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# UPLOAD RECEIPT
# =============================================================================

@dataclass(frozen=True, slots=True)
class UploadReceipt:
    """
    Result of a successful write.

    Attributes:
        bucket: Destination bucket.
        key: Object key written.
        size_bytes: Size of the caller's buffer.
        uploaded_bytes: Size of the body sent (compressed size when gzip).
        content_encoding: "gzip" or "".
        etag: Entity tag reported by the store.
        version_id: Version ID for versioned buckets.
    """
    bucket: str
    key: str
    size_bytes: int
    uploaded_bytes: int
    content_encoding: str = ""
    etag: str = ""
    version_id: Optional[str] = None


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

@dataclass(slots=True)
class WriterMetrics:
    """
    Counters for one writer instance.

    Mutated from the event loop only.
    """
    put_count: int = 0
    bytes_in: int = 0
    bytes_uploaded: int = 0
    put_latency_sum_ns: int = 0

    compression_errors: int = 0
    session_errors: int = 0
    upload_errors: int = 0

    def record_upload(self, size_bytes: int, uploaded_bytes: int, latency_ns: int) -> None:
        self.put_count += 1
        self.bytes_in += size_bytes
        self.bytes_uploaded += uploaded_bytes
        self.put_latency_sum_ns += latency_ns

    def record_failure(self, error: ExportError) -> None:
        if isinstance(error, CompressionError):
            self.compression_errors += 1
        elif isinstance(error, SessionError):
            self.session_errors += 1
        elif isinstance(error, UploadError):
            self.upload_errors += 1

    @property
    def compression_ratio(self) -> float:
        """Fraction of input bytes saved by compression."""
        if self.bytes_in == 0:
            return 0.0
        return 1 - (self.bytes_uploaded / self.bytes_in)

    def get_upload_throughput_mbps(self) -> float:
        """Average upload throughput in MB/s."""
        if self.put_latency_sum_ns == 0:
            return 0.0
        seconds = self.put_latency_sum_ns / 1_000_000_000
        return (self.bytes_uploaded / 1_000_000) / seconds


# =============================================================================
# S3 WRITER
# =============================================================================

class S3Writer:
    """
    Writes telemetry buffers to S3-compatible storage.

    Collaborators are injected so tests can substitute them:
    the session factory (network), the random source (key
    disambiguator) and the clock (time partition).

    Example:
        >>> writer = S3Writer(S3UploaderConfig(bucket="telemetry"))
        >>> result = await writer.write_buffer(payload, "traces", "json")
        >>> if result.is_ok():
        ...     print(result.unwrap().key)
    """

    __slots__ = (
        "_config",
        "_session_factory",
        "_rng",
        "_clock",
        "_logger",
        "_metrics",
    )

    def __init__(
        self,
        config: S3UploaderConfig,
        *,
        session_factory: Optional[SessionFactory] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._config = config
        self._session_factory = session_factory or create_session
        self._rng = rng or random.Random()
        self._clock = clock or utc_now
        self._logger = (logger or StructuredLogger("s3export.writer")).bind(
            bucket=config.bucket
        )
        self._metrics = WriterMetrics()

    @property
    def config(self) -> S3UploaderConfig:
        return self._config

    @property
    def metrics(self) -> WriterMetrics:
        """Get current metrics snapshot."""
        return self._metrics

    # -------------------------------------------------------------------------
    # WRITE PATH
    # -------------------------------------------------------------------------

    async def write_buffer(
        self,
        buf: bytes,
        metadata: str,
        file_format: str,
        *,
        timeout: Optional[float] = None,
    ) -> Result[UploadReceipt, ExportError]:
        """
        Upload one buffer as one object.

        Args:
            buf: Finalized payload, treated as opaque bytes.
            metadata: Label embedded verbatim in the object name.
            file_format: Extension embedded verbatim ("" for none).
            timeout: Deadline in seconds for the put_object call.

        Returns:
            Ok(UploadReceipt) on success.
            Err(CompressionError | SessionError | UploadError) on the
            first failure.
        """
        result = await self._write(buf, metadata, file_format, timeout)
        if result.is_err():
            self._metrics.record_failure(result.error)
            self._logger.debug("Buffer write failed", error=result.error)
        return result

    async def _write(
        self,
        buf: bytes,
        metadata: str,
        file_format: str,
        timeout: Optional[float],
    ) -> Result[UploadReceipt, ExportError]:
        config = self._config
        key = build_key(
            self._clock(),
            config.s3_prefix,
            config.partition,
            config.file_prefix,
            metadata,
            file_format,
            config.compression,
            rng=self._rng,
        )

        encoding = ""
        body = buf
        if config.compression == Compression.GZIP:
            encoding = C.CONTENT_ENCODING_GZIP
            compressed = gzip_compress(buf)
            if compressed.is_err():
                return compressed
            body = compressed.unwrap()

        session_result = await self._session_factory(config)
        if session_result.is_err():
            return session_result

        return await self._upload(
            session_result.unwrap(), key, body, encoding, len(buf), timeout
        )

    async def _upload(
        self,
        session: S3Session,
        key: str,
        body: bytes,
        encoding: str,
        size_bytes: int,
        timeout: Optional[float],
    ) -> Result[UploadReceipt, ExportError]:
        """Single put_object; no retry, no partial-object cleanup."""
        bucket = self._config.bucket

        put_kwargs: Dict[str, Any] = {
            "Bucket": bucket,
            "Key": key,
            "Body": body,
        }
        if encoding:
            put_kwargs["ContentEncoding"] = encoding

        async with contextlib.AsyncExitStack() as stack:
            try:
                client = await stack.enter_async_context(session.client())
            except (BotoCoreError, ValueError) as e:
                return Err(SessionError.construction_failed("client", cause=e))

            start_ns = time.perf_counter_ns()
            try:
                response = await asyncio.wait_for(
                    client.put_object(**put_kwargs), timeout
                )
            except asyncio.TimeoutError:
                return Err(UploadError.timeout(bucket, key, timeout))
            except Exception as e:
                return Err(UploadError.from_exception(bucket, key, e))

        latency_ns = time.perf_counter_ns() - start_ns
        self._metrics.record_upload(size_bytes, len(body), latency_ns)

        self._logger.debug(
            "Object uploaded",
            object_key=key,
            size_bytes=size_bytes,
            uploaded_bytes=len(body),
            content_encoding=encoding,
        )

        response = response or {}
        return Ok(UploadReceipt(
            bucket=bucket,
            key=key,
            size_bytes=size_bytes,
            uploaded_bytes=len(body),
            content_encoding=encoding,
            etag=str(response.get("ETag", "")).strip('"'),
            version_id=response.get("VersionId"),
        ))


# =============================================================================
# FUNCTIONAL ENTRY POINT
# =============================================================================

async def write_buffer(
    buf: bytes,
    config: S3UploaderConfig,
    metadata: str,
    file_format: str,
    *,
    timeout: Optional[float] = None,
    session_factory: Optional[SessionFactory] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None,
) -> Result[UploadReceipt, ExportError]:
    """
    Upload one buffer with the given configuration.

    Convenience wrapper building a throwaway S3Writer; callers flushing
    repeatedly should keep a writer to accumulate metrics.
    """
    writer = S3Writer(
        config,
        session_factory=session_factory,
        rng=rng,
        clock=clock,
    )
    return await writer.write_buffer(buf, metadata, file_format, timeout=timeout)
