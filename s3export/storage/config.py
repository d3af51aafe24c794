"""
Uploader Configuration Module
=============================

Type-safe, immutable configuration for the S3 uploader.
The configuration is owned by the caller and read-only to the write path.

Design Principles:
------------------
1. **Immutability**: Frozen dataclass, safe to share across concurrent writes
2. **Validation**: `validate()` reports every problem at once as a Result
3. **Defaults**: us-east-1, minute partitions, no compression
4. **Environment**: Supports loading from environment variables

Author: Planetary AI Systems
License: MIT
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Union

from s3export.core import constants as C
from s3export.core.errors import ConfigurationError
from s3export.core.types import Result, Ok, Err


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Partition(str, Enum):
    """
    Time granularity of the key path.

    Any value other than HOUR behaves as MINUTE.
    """
    HOUR = "hour"
    MINUTE = "minute"

    @classmethod
    def parse(cls, value: Union[str, Partition, None]) -> Partition:
        """Parse leniently; unknown or empty values fall back to MINUTE."""
        if isinstance(value, Partition):
            return value
        if value is not None and value.strip().lower() == cls.HOUR.value:
            return cls.HOUR
        return cls.MINUTE


class Compression(str, Enum):
    """Body compression applied before upload."""
    NONE = "none"
    GZIP = "gzip"

    @classmethod
    def parse(cls, value: Union[str, Compression, None]) -> Compression:
        """
        Parse a compression name.

        Empty means NONE. Unknown names are rejected.

        Raises:
            ValueError: If the name is not a supported compression.
        """
        if isinstance(value, Compression):
            return value
        normalized = (value or "").strip().lower()
        if not normalized:
            return cls.NONE
        return cls(normalized)

    @property
    def is_compressed(self) -> bool:
        return self is not Compression.NONE


# =============================================================================
# S3 UPLOADER CONFIGURATION
# =============================================================================

@dataclass(frozen=True, slots=True)
class S3UploaderConfig:
    """
    S3-compatible uploader configuration.

    Supports AWS S3, MinIO, and other S3-compatible stores.

    Thread Safety:
    -------------
    Frozen dataclass - immutable after construction.

    Attributes:
        bucket: Destination bucket name.
        region: AWS region of the bucket.
        s3_prefix: Key prefix placed before the time partition path.
        file_prefix: Prefix of the object file name.
        partition: Time granularity of the key path.
        compression: Body compression (none or gzip).
        endpoint: Custom endpoint for MinIO/localstack ("" for AWS).
        force_path_style: Use path-style bucket addressing.
        disable_ssl: Use plain HTTP when no endpoint scheme is given.
        role_arn: Role to assume on top of the base credentials ("" for none).
    """
    bucket: str
    region: str = C.DEFAULT_REGION
    s3_prefix: str = ""
    file_prefix: str = ""
    partition: Partition = Partition.MINUTE
    compression: Compression = Compression.NONE
    endpoint: str = ""
    force_path_style: bool = False
    disable_ssl: bool = False
    role_arn: str = ""

    def validate(self) -> Result[None, ConfigurationError]:
        """
        Validate configuration invariants.

        A bucket and a region are required; the compression must be one
        the writer knows how to apply.
        """
        problems: list[str] = []
        if not self.region:
            problems.append("region is required")
        if not self.bucket:
            problems.append("bucket is required")
        try:
            Compression.parse(self.compression)
        except ValueError:
            problems.append(f"unknown compression {self.compression!r}")
        if problems:
            return Err(ConfigurationError.invalid(problems))
        return Ok(None)

    @classmethod
    def from_env(cls, prefix: str = C.DEFAULT_ENV_PREFIX) -> S3UploaderConfig:
        """
        Construct configuration from environment variables.

        Environment Variables:
        - {prefix}_BUCKET: Bucket name (required)
        - {prefix}_REGION: AWS region (default: us-east-1)
        - {prefix}_PREFIX: Key prefix
        - {prefix}_FILE_PREFIX: File name prefix
        - {prefix}_PARTITION: hour | minute (default: minute)
        - {prefix}_COMPRESSION: none | gzip (default: none)
        - {prefix}_ENDPOINT: Custom endpoint URL
        - {prefix}_FORCE_PATH_STYLE: Path-style addressing (default: false)
        - {prefix}_DISABLE_SSL: Plain HTTP (default: false)
        - {prefix}_ROLE_ARN: Role to assume

        Args:
            prefix: Environment variable prefix.

        Returns:
            S3UploaderConfig populated from environment.

        Raises:
            ValueError: If the bucket is missing or the compression is unknown.
        """
        def _get(key: str, default: str = "") -> str:
            return os.environ.get(f"{prefix}_{key}", default)

        def _get_bool(key: str, default: bool) -> bool:
            val = _get(key).lower()
            if val in ("true", "1", "yes"):
                return True
            if val in ("false", "0", "no"):
                return False
            return default

        bucket = _get("BUCKET")
        if not bucket:
            raise ValueError(f"Environment variable {prefix}_BUCKET is required")

        return cls(
            bucket=bucket,
            region=_get("REGION", C.DEFAULT_REGION),
            s3_prefix=_get("PREFIX"),
            file_prefix=_get("FILE_PREFIX"),
            partition=Partition.parse(_get("PARTITION") or None),
            compression=Compression.parse(_get("COMPRESSION")),
            endpoint=_get("ENDPOINT"),
            force_path_style=_get_bool("FORCE_PATH_STYLE", False),
            disable_ssl=_get_bool("DISABLE_SSL", False),
            role_arn=_get("ROLE_ARN"),
        )

    def describe(self) -> str:
        """One-line human summary, without credentials."""
        parts = [
            f"bucket={self.bucket}",
            f"region={self.region}",
            f"partition={Partition.parse(self.partition).value}",
            f"compression={Compression.parse(self.compression).value}",
        ]
        if self.endpoint:
            parts.append(f"endpoint={self.endpoint}")
        if self.role_arn:
            parts.append(f"role_arn={self.role_arn}")
        return " ".join(parts)
