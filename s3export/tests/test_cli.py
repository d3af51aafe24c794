"""Tests for the command line entry point."""

import asyncio
import gzip

import pytest
from botocore.exceptions import ClientError

from s3export.__main__ import build_parser, main, upload_file
from s3export.core.types import Ok
from s3export.tests.conftest import FakeS3Client, FakeSession, RecordingSessionFactory


@pytest.fixture
def cli_env(monkeypatch):
    for key in ("REGION", "PREFIX", "FILE_PREFIX", "PARTITION", "COMPRESSION",
                "ENDPOINT", "FORCE_PATH_STYLE", "DISABLE_SSL", "ROLE_ARN"):
        monkeypatch.delenv(f"S3EXPORT_{key}", raising=False)
    monkeypatch.setenv("S3EXPORT_BUCKET", "telemetry")
    monkeypatch.setenv("S3EXPORT_PREFIX", "logs")
    monkeypatch.setenv("S3EXPORT_PARTITION", "hour")
    return monkeypatch


@pytest.fixture
def batch_file(tmp_path):
    path = tmp_path / "batch.json"
    path.write_bytes(b'{"resourceLogs":[]}')
    return path


def _run(argv, factory):
    args = build_parser().parse_args(argv)
    return asyncio.run(upload_file(args, session_factory=factory))


class TestUploadFile:

    def test_success(self, cli_env, batch_file, session_factory, fake_client, capsys):
        code = _run([str(batch_file), "--metadata", "logs", "--format", "json"], session_factory)

        assert code == 0
        [call] = fake_client.put_calls
        assert call["Bucket"] == "telemetry"
        assert call["Key"].startswith("logs/year=")
        assert call["Key"].endswith(".json")
        assert call["Body"] == b'{"resourceLogs":[]}'
        out = capsys.readouterr().out
        assert out.startswith(f"s3://telemetry/{call['Key']} (")

    def test_gzip_from_environment(self, cli_env, batch_file, session_factory, fake_client):
        cli_env.setenv("S3EXPORT_COMPRESSION", "gzip")

        assert _run([str(batch_file), "--format", "json"], session_factory) == 0

        [call] = fake_client.put_calls
        assert call["Key"].endswith(".json.gz")
        assert gzip.decompress(call["Body"]) == batch_file.read_bytes()

    def test_missing_bucket(self, cli_env, batch_file, session_factory, capsys):
        cli_env.delenv("S3EXPORT_BUCKET")
        assert _run([str(batch_file)], session_factory) == 1
        assert "S3EXPORT_BUCKET" in capsys.readouterr().err
        assert session_factory.configs == []

    def test_unreadable_file(self, cli_env, tmp_path, session_factory, capsys):
        assert _run([str(tmp_path / "missing.json")], session_factory) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_upload_failure(self, cli_env, batch_file, capsys):
        denied = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        factory = RecordingSessionFactory(Ok(FakeSession(FakeS3Client(error=denied))))

        assert _run([str(batch_file)], factory) == 1
        assert "UPLOAD_ACCESS_DENIED" in capsys.readouterr().err


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args(["batch.json"])
        assert args.metadata == ""
        assert args.file_format == ""
        assert args.timeout is None
        assert args.env_prefix == "S3EXPORT"
        assert not args.json_logs

    def test_bad_log_level_exits_before_upload(self, batch_file, capsys):
        assert main([str(batch_file), "--log-level", "loud"]) == 2
        assert "Unknown log level" in capsys.readouterr().err
