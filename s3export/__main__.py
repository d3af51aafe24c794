#!/usr/bin/env python3
"""
S3 Exporter command line entry point.

Uploads one file as one telemetry object using configuration from the
environment.

Usage:
    S3EXPORT_BUCKET=telemetry python -m s3export batch.json --metadata traces --format json

    # Gzip, hourly partitions, local MinIO
    S3EXPORT_BUCKET=telemetry S3EXPORT_COMPRESSION=gzip S3EXPORT_PARTITION=hour \\
    S3EXPORT_ENDPOINT=http://localhost:9000 S3EXPORT_FORCE_PATH_STYLE=true \\
        python -m s3export batch.json
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from s3export.core import constants as C
from s3export.observability.logging import LogLevel, setup_logging
from s3export.storage.config import S3UploaderConfig
from s3export.storage.writer import S3Writer, SessionFactory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3export",
        description="Upload a telemetry batch to S3-compatible storage",
    )
    parser.add_argument("path", type=Path, help="File holding the payload")
    parser.add_argument("--metadata", default="", help="Label embedded in the object name")
    parser.add_argument("--format", dest="file_format", default="", help="Extension, e.g. json")
    parser.add_argument("--timeout", type=float, default=None, help="Upload deadline in seconds")
    parser.add_argument("--env-prefix", default=C.DEFAULT_ENV_PREFIX, help="Environment variable prefix")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser


async def upload_file(
    args: argparse.Namespace,
    session_factory: Optional[SessionFactory] = None,
) -> int:
    """
    Load configuration, read the payload and upload it.

    Returns:
        Process exit code.
    """
    try:
        config = S3UploaderConfig.from_env(args.env_prefix)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    validation = config.validate()
    if validation.is_err():
        print(f"Validation error: {validation.error}", file=sys.stderr)
        return 1

    try:
        payload = args.path.read_bytes()
    except OSError as e:
        print(f"Cannot read {args.path}: {e}", file=sys.stderr)
        return 1

    writer = S3Writer(config, session_factory=session_factory)
    result = await writer.write_buffer(
        payload, args.metadata, args.file_format, timeout=args.timeout
    )

    if result.is_err():
        print(f"Upload failed: {result.error}", file=sys.stderr)
        return 1

    receipt = result.unwrap()
    print(f"s3://{receipt.bucket}/{receipt.key} ({receipt.uploaded_bytes} bytes)")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Synchronous entry point."""
    args = build_parser().parse_args(argv)

    try:
        level = LogLevel.parse(args.log_level)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    setup_logging(level, json_output=args.json_logs)

    try:
        return asyncio.run(upload_file(args))
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
