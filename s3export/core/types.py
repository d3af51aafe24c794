"""
Core Type Definitions for the S3 Exporter

Every fallible stage of a write (compression, session construction, the
remote put) hands back a Result instead of raising. The writer stops at
the first Err and passes it to the caller untouched, so one write yields
exactly one terminal value.

    result = gzip_compress(buf)
    if result.is_err():
        return result          # CompressionError, unchanged
    body = result.unwrap()
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Literal, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


# =============================================================================
# RESULT
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A completed stage and its output (compressed body, session, receipt)."""

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    A failed stage.

    `error` is normally an ExportError subclass; `unwrap()` re-raises it
    so callers that prefer exceptions can opt in at the call site.
    """

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Raises:
            The wrapped error when it is an exception, else RuntimeError.
        """
        if isinstance(self.error, BaseException):
            raise self.error
        raise RuntimeError(f"Called unwrap() on Err: {self.error!r}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]


# =============================================================================
# ERROR TIMESTAMP
# =============================================================================
@dataclass(frozen=True, slots=True, order=True)
class Timestamp:
    """Wall-clock instant in nanoseconds since the Unix epoch (UTC)."""

    nanos: int

    @classmethod
    def now(cls) -> Timestamp:
        return cls(nanos=time.time_ns())

    def isoformat(self) -> str:
        """RFC 3339 rendering, for log correlation."""
        seconds, nanos = divmod(self.nanos, 1_000_000_000)
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
        return moment.replace(microsecond=nanos // 1000).isoformat()

    def __repr__(self) -> str:
        return f"Timestamp({self.isoformat()})"
