"""
Structured Logging for the Exporter

- One JSON object per line, ready for Loki/ELK ingestion
- Per-write fields (bucket, object key, sizes) passed as keyword arguments
- Fields shared by a whole flush can be scoped with `upload_context()`
- ExportError values are rendered through their `to_dict()`

The writer only emits DEBUG records; applications decide what reaches
their handlers through `setup_logging()` or their own logging config.
"""

from __future__ import annotations

import contextlib
import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Iterator, Optional, TextIO

from s3export.core.errors import ExportError


class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def parse(cls, name: str) -> LogLevel:
        """Parse a level name such as "debug" or "INFO"."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {name!r}") from None


_upload_fields: ContextVar[dict[str, Any]] = ContextVar("upload_fields", default={})

# Attributes every stdlib LogRecord carries; anything else came from `extra`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


@contextlib.contextmanager
def upload_context(**fields: Any) -> Iterator[None]:
    """Attach fields to every record emitted inside the block."""
    token = _upload_fields.set({**_upload_fields.get(), **fields})
    try:
        yield
    finally:
        _upload_fields.reset(token)


def _jsonable(value: Any) -> Any:
    if isinstance(value, ExportError):
        return value.to_dict()
    return value


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = {
            "@timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        document.update(_upload_fields.get())
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                document[key] = _jsonable(value)
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, default=str)


class StructuredLogger:
    """
    Thin keyword-argument front end over a stdlib logger.

        log = StructuredLogger("s3export.writer").bind(bucket="telemetry")
        log.debug("Object uploaded", object_key=key, size_bytes=n)

    Level filtering is left to the logging configuration unless a level
    is given explicitly.
    """

    __slots__ = ("_logger", "_bound")

    def __init__(self, name: str, level: Optional[LogLevel] = None) -> None:
        self._logger = logging.getLogger(name)
        if level is not None:
            self._logger.setLevel(level.value)
        self._bound: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **fields: Any) -> StructuredLogger:
        """Child logger that adds `fields` to each record."""
        child = StructuredLogger(self._logger.name)
        child._bound = {**self._bound, **fields}
        return child

    def debug(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(LogLevel.ERROR, message, fields)

    def _log(self, level: LogLevel, message: str, fields: dict[str, Any]) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, extra={**self._bound, **fields})


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Install a single root handler.

    The AWS SDK and transport loggers are capped at WARNING so DEBUG
    output shows exporter records rather than request dumps.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("botocore", "aiobotocore", "aioboto3", "urllib3", "aiohttp", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
