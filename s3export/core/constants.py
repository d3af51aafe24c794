"""
Constants for the S3 Exporter

All magic numbers and configuration defaults centralized here.
"""

from typing import Final

# =============================================================================
# OBJECT KEY
# =============================================================================
# Random disambiguator range: [RANDOM_ID_MIN, RANDOM_ID_MAX)
RANDOM_ID_MIN: Final[int] = 100_000_000
RANDOM_ID_MAX: Final[int] = 999_999_999

GZIP_KEY_SUFFIX: Final[str] = ".gz"

# =============================================================================
# UPLOAD
# =============================================================================
CONTENT_ENCODING_GZIP: Final[str] = "gzip"

# One request per put; retry policy belongs to the caller
TRANSPORT_MAX_ATTEMPTS: Final[int] = 1

# =============================================================================
# CONFIGURATION DEFAULTS
# =============================================================================
DEFAULT_REGION: Final[str] = "us-east-1"
DEFAULT_ENV_PREFIX: Final[str] = "S3EXPORT"
