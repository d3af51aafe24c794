"""
Object Key Builder: Time-Partitioned S3 Keys

Provides deterministic-shape, collision-resistant object keys:

    <prefix>/year=YYYY/month=MM/day=DD/hour=HH[/minute=mm]/<file_prefix><metadata>_<random>[.<format>][.gz]

Partitioning Strategy:
    - HOUR: objects grouped per hour (four path components)
    - MINUTE: objects grouped per minute (five path components)
    - Any other granularity value behaves as MINUTE

Uniqueness:
    Two uploads in the same partition are told apart only by a 9-digit
    random disambiguator in [100000000, 999999999). There is no persistent
    counter; the birthday-collision probability is accepted for exporter
    write volumes. The generator is injectable so tests can seed it.

Complexity: O(len(key)) - string formatting only, no I/O.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Optional, Union

from s3export.core import constants as C
from s3export.storage.config import Compression, Partition

_default_rng = random.Random()


def time_key(timestamp: datetime, partition: Union[Partition, str]) -> str:
    """
    Render the Hive-style time partition path for a timestamp.

    The year is unpadded; month, day, hour and minute are two digits.
    """
    time_path = (
        f"year={timestamp.year}/month={timestamp.month:02d}/"
        f"day={timestamp.day:02d}/hour={timestamp.hour:02d}"
    )
    if partition == Partition.HOUR:
        return time_path
    return f"{time_path}/minute={timestamp.minute:02d}"


def random_in_range(
    low: int,
    high: int,
    rng: Optional[random.Random] = None,
) -> int:
    """Uniform integer in [low, high)."""
    return (rng or _default_rng).randrange(low, high)


def build_key(
    timestamp: datetime,
    key_prefix: str,
    partition: Union[Partition, str],
    file_prefix: str,
    metadata: str,
    file_format: str,
    compression: Union[Compression, str],
    rng: Optional[random.Random] = None,
) -> str:
    """
    Build the destination object key.

    Args:
        timestamp: Point in time selecting the partition.
        key_prefix: Leading key segment (may be empty).
        partition: HOUR or MINUTE granularity.
        file_prefix: Prepended to the file name (may be empty).
        metadata: Free-form label embedded in the file name.
        file_format: Extension without the dot; empty omits it.
        compression: GZIP appends ".gz" after the extension.
        rng: Random source for the disambiguator.

    Returns:
        The object key. Never fails; inputs are used verbatim.
    """
    random_id = random_in_range(C.RANDOM_ID_MIN, C.RANDOM_ID_MAX, rng)
    suffix = f".{file_format}" if file_format else ""

    key = (
        f"{key_prefix}/{time_key(timestamp, partition)}/"
        f"{file_prefix}{metadata}_{random_id}{suffix}"
    )

    if compression == Compression.GZIP:
        key += C.GZIP_KEY_SUFFIX

    return key
