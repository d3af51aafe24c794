"""
Storage module: object keys, sessions, and the S3 buffer writer.

Usage:
    from s3export.storage import S3UploaderConfig, S3Writer, Compression

    config = S3UploaderConfig(bucket="telemetry", compression=Compression.GZIP)
    writer = S3Writer(config)
    result = await writer.write_buffer(payload, "metrics", "json")
"""

from s3export.storage.config import (
    Compression,
    Partition,
    S3UploaderConfig,
)
from s3export.storage.keys import (
    build_key,
    random_in_range,
    time_key,
)
from s3export.storage.compression import gzip_compress
from s3export.storage.session import (
    S3Session,
    create_session,
    session_config,
)
from s3export.storage.writer import (
    S3Writer,
    UploadReceipt,
    WriterMetrics,
    write_buffer,
)

__all__ = [
    # Configuration
    "Compression",
    "Partition",
    "S3UploaderConfig",
    # Keys
    "build_key",
    "random_in_range",
    "time_key",
    # Compression
    "gzip_compress",
    # Session
    "S3Session",
    "create_session",
    "session_config",
    # Writer
    "S3Writer",
    "UploadReceipt",
    "WriterMetrics",
    "write_buffer",
]
