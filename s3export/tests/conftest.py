"""Shared fixtures: in-process stand-ins for the S3 service and sessions."""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import pytest

from s3export.core.types import Ok
from s3export.storage.config import S3UploaderConfig


class FixedRandom(random.Random):
    """Random source whose randrange always returns one value."""

    def __init__(self, value: int) -> None:
        super().__init__()
        self.value = value
        self.calls: list[tuple[int, Optional[int]]] = []

    def randrange(self, start: int, stop: Optional[int] = None, step: int = 1) -> int:  # type: ignore[override]
        self.calls.append((start, stop))
        return self.value


class FakeS3Client:
    """Records put_object calls; optionally fails or stalls."""

    def __init__(
        self,
        error: Optional[BaseException] = None,
        delay_seconds: float = 0.0,
        response: Optional[dict[str, Any]] = None,
    ) -> None:
        self.error = error
        self.delay_seconds = delay_seconds
        self.response = response if response is not None else {
            "ETag": '"9b2cf535f27731c974343645a3985328"',
        }
        self.put_calls: list[dict[str, Any]] = []
        self.closed = False

    async def __aenter__(self) -> FakeS3Client:
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.closed = True

    async def put_object(self, **kwargs: Any) -> dict[str, Any]:
        self.put_calls.append(kwargs)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.response


class FakeSession:
    """Duck-typed S3Session handing out a single fake client."""

    def __init__(self, client: FakeS3Client) -> None:
        self._client = client
        self.client_calls = 0

    def client(self) -> FakeS3Client:
        self.client_calls += 1
        return self._client


class RecordingSessionFactory:
    """Session factory returning a fixed Result and recording configs."""

    def __init__(self, result: Any) -> None:
        self.result = result
        self.configs: list[S3UploaderConfig] = []

    async def __call__(self, config: S3UploaderConfig) -> Any:
        self.configs.append(config)
        return self.result


@pytest.fixture
def payload() -> bytes:
    return b'{"resourceSpans":[{"scopeSpans":[{"spans":[{"name":"checkout"}]}]}]}' * 20


@pytest.fixture
def fixed_time() -> datetime:
    return datetime(2024, 3, 5, 9, 7, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(fixed_time: datetime) -> Callable[[], datetime]:
    return lambda: fixed_time


@pytest.fixture
def fixed_rng() -> FixedRandom:
    return FixedRandom(123456789)


@pytest.fixture
def fake_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def session_factory(fake_client: FakeS3Client) -> RecordingSessionFactory:
    return RecordingSessionFactory(Ok(FakeSession(fake_client)))


@pytest.fixture
def isolated_aws_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Static base credentials, no shared config files, no metadata lookups."""
    for name in (
        "AWS_PROFILE",
        "AWS_DEFAULT_PROFILE",
        "AWS_SESSION_TOKEN",
        "AWS_SECURITY_TOKEN",
        "AWS_ROLE_ARN",
        "AWS_WEB_IDENTITY_TOKEN_FILE",
        "AWS_CONTAINER_CREDENTIALS_RELATIVE_URI",
        "AWS_CONTAINER_CREDENTIALS_FULL_URI",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIDBASEEXAMPLE")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "base-secret")
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "credentials"))
    monkeypatch.setenv("AWS_EC2_METADATA_DISABLED", "true")
