"""
Error Hierarchy for the S3 Exporter

Design Principles:
- Forbid exceptions for control flow (use Result types)
- Never swallow errors or use null for absence
- Carry full error context for debugging and audit trails

Each error type includes:
- Unique error code for programmatic handling
- Human-readable message for logging
- Optional cause (the library exception, unchanged)
- Timestamp for correlation with logs

Usage:
    result = await writer.write_buffer(buf, "traces", "json")
    match result:
        case Ok(receipt):
            print(receipt.key)
        case Err(UploadError() as err) if err.code is ErrorCode.UPLOAD_ACCESS_DENIED:
            alert_on_call(err)
        case Err(err):
            raise err
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from s3export.core.types import Timestamp


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by stage of the write path:
    - 1xxx: Compression errors
    - 2xxx: Session errors
    - 3xxx: Upload errors
    - 9xxx: Configuration/internal errors
    """

    # Compression errors (1xxx)
    COMPRESSION_FAILED = 1001

    # Session errors (2xxx)
    SESSION_INVALID_REGION = 2001
    SESSION_INVALID_ENDPOINT = 2002
    SESSION_CONSTRUCTION_FAILED = 2003

    # Upload errors (3xxx)
    UPLOAD_REQUEST_FAILED = 3001
    UPLOAD_ACCESS_DENIED = 3002
    UPLOAD_BUCKET_NOT_FOUND = 3003
    UPLOAD_TIMEOUT = 3004

    # Configuration errors (9xxx)
    CONFIG_INVALID = 9001


# Service error codes reported by S3/STS that map onto dedicated upload codes.
_ACCESS_DENIED_CODES = frozenset({
    "AccessDenied",
    "AllAccessDisabled",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
    "Forbidden",
    "403",
})
_BUCKET_NOT_FOUND_CODES = frozenset({"NoSuchBucket"})


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass(eq=False)
class ExportError(Exception):
    """
    Base class for all exporter errors.

    Provides common infrastructure for error handling:
    - Unique error ID for correlation
    - Error code for programmatic handling
    - Timestamp for correlation
    - Cause for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: Timestamp = field(default_factory=Timestamp.now)
    cause: Optional[BaseException] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize error to dictionary for structured logging."""
        data: dict[str, Any] = {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# COMPRESSION ERRORS
# =============================================================================
@dataclass(eq=False)
class CompressionError(ExportError):
    """The payload could not be gzip-framed into the in-memory sink."""

    @classmethod
    def write_failed(
        cls,
        size_bytes: int,
        cause: Optional[BaseException] = None,
    ) -> CompressionError:
        return cls(
            code=ErrorCode.COMPRESSION_FAILED,
            message=f"gzip compression of {size_bytes}B payload failed: {cause}",
            cause=cause,
            context={"size_bytes": size_bytes},
        )


# =============================================================================
# SESSION ERRORS
# =============================================================================
@dataclass(eq=False)
class SessionError(ExportError):
    """
    An authenticated S3 client could not be constructed.

    Covers malformed regions and endpoints detected up front as well as
    failures raised by botocore while building the session or client.
    Assume-role failures are NOT reported here; they surface when the
    deferred credentials are first used by the upload.
    """

    @classmethod
    def invalid_region(
        cls,
        region: str,
        cause: Optional[BaseException] = None,
    ) -> SessionError:
        return cls(
            code=ErrorCode.SESSION_INVALID_REGION,
            message=f"Invalid region name {region!r}",
            cause=cause,
            context={"region": region},
        )

    @classmethod
    def invalid_endpoint(cls, endpoint: str) -> SessionError:
        return cls(
            code=ErrorCode.SESSION_INVALID_ENDPOINT,
            message=f"Invalid endpoint URL {endpoint!r}",
            context={"endpoint": endpoint},
        )

    @classmethod
    def construction_failed(
        cls,
        stage: str,
        cause: Optional[BaseException] = None,
    ) -> SessionError:
        """Session or client construction raised inside botocore."""
        return cls(
            code=ErrorCode.SESSION_CONSTRUCTION_FAILED,
            message=f"Failed to construct S3 {stage}: {cause}",
            cause=cause,
            context={"stage": stage},
        )


# =============================================================================
# UPLOAD ERRORS
# =============================================================================
@dataclass(eq=False)
class UploadError(ExportError):
    """
    The remote put operation failed.

    The transport/service exception is kept as `cause`; the
    service error code (when the service answered) is kept in context.
    """

    @classmethod
    def from_exception(
        cls,
        bucket: str,
        key: str,
        cause: BaseException,
    ) -> UploadError:
        """Classify a transport/service failure from the put call."""
        service_code = _service_error_code(cause)
        if service_code in _ACCESS_DENIED_CODES:
            code = ErrorCode.UPLOAD_ACCESS_DENIED
        elif service_code in _BUCKET_NOT_FOUND_CODES:
            code = ErrorCode.UPLOAD_BUCKET_NOT_FOUND
        else:
            code = ErrorCode.UPLOAD_REQUEST_FAILED

        context: dict[str, Any] = {"bucket": bucket, "key": key}
        if service_code:
            context["service_code"] = service_code

        return cls(
            code=code,
            message=f"Upload of s3://{bucket}/{key} failed: {cause}",
            cause=cause,
            context=context,
        )

    @classmethod
    def timeout(
        cls,
        bucket: str,
        key: str,
        timeout_seconds: float,
    ) -> UploadError:
        return cls(
            code=ErrorCode.UPLOAD_TIMEOUT,
            message=f"Upload of s3://{bucket}/{key} timed out after {timeout_seconds}s",
            context={"bucket": bucket, "key": key, "timeout_seconds": timeout_seconds},
        )


def _service_error_code(exc: BaseException) -> Optional[str]:
    """Extract the AWS error code from a botocore ClientError-like exception."""
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return None
    code = response.get("Error", {}).get("Code")
    return str(code) if code else None


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================
@dataclass(eq=False)
class ConfigurationError(ExportError):
    """Uploader configuration is missing required values or is inconsistent."""

    @classmethod
    def invalid(cls, problems: list[str]) -> ConfigurationError:
        return cls(
            code=ErrorCode.CONFIG_INVALID,
            message="Invalid configuration: " + "; ".join(problems),
            context={"problems": problems},
        )
