"""
s3export: Telemetry Buffer Export to S3-Compatible Object Storage

Persists in-memory telemetry batches as objects under time-partitioned
keys:

    <prefix>/year=YYYY/month=MM/day=DD/hour=HH[/minute=mm]/<file_prefix><metadata>_<random>[.<format>][.gz]

Components:
- Key builder: pure, time-partitioned, random-disambiguated keys
- Session factory: aioboto3 sessions with optional role assumption
- Writer: buffer -> optional gzip -> session -> single put_object

Author: Planetary AI Systems
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Planetary AI Systems"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from s3export.core.types import Result, Ok, Err
from s3export.core.errors import (
    ErrorCode,
    ExportError,
    CompressionError,
    SessionError,
    UploadError,
    ConfigurationError,
)
from s3export.storage import (
    Compression,
    Partition,
    S3UploaderConfig,
    S3Session,
    S3Writer,
    UploadReceipt,
    build_key,
    create_session,
    write_buffer,
)

__all__ = [
    "__version__",
    # Result types
    "Result",
    "Ok",
    "Err",
    # Errors
    "ErrorCode",
    "ExportError",
    "CompressionError",
    "SessionError",
    "UploadError",
    "ConfigurationError",
    # Storage
    "Compression",
    "Partition",
    "S3UploaderConfig",
    "S3Session",
    "S3Writer",
    "UploadReceipt",
    "build_key",
    "create_session",
    "write_buffer",
]
