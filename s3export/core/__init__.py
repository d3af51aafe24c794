"""
Core module: Result types, error hierarchy, and constants.
"""

from s3export.core.types import (
    Result,
    Ok,
    Err,
    Timestamp,
)
from s3export.core.errors import (
    ErrorCode,
    ExportError,
    CompressionError,
    SessionError,
    UploadError,
    ConfigurationError,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Timestamp",
    "ErrorCode",
    "ExportError",
    "CompressionError",
    "SessionError",
    "UploadError",
    "ConfigurationError",
]
