"""Unit tests for invocation orchestration."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ResponseStreamingError

from core.config import RailFeedConfig
from ingest import feed_source
from ingest.pipeline import FeedIngestRunner
from store.dedup_store import InMemoryDedupStore
from store.publishers import InMemoryPublisher
from store.station_reference import default_station_table
from tests.fixture_paths import fixture_path


def _runner(tmp_path: Path, **overrides: object) -> tuple[FeedIngestRunner, InMemoryPublisher]:
    config = replace(RailFeedConfig.from_env(), data_root=tmp_path, **overrides)
    publisher = InMemoryPublisher()
    runner = FeedIngestRunner(config, default_station_table(), InMemoryDedupStore(), publisher)
    return runner, publisher


def test_handle_rejects_unsupported_feed_type(tmp_path: Path) -> None:
    """Invalid requests fail without statistics."""
    runner, publisher = _runner(tmp_path)

    result = runner.handle({"feedType": "weekly"}, run_id="run-1")

    assert result.status == "failed" and result.statistics is None
    assert result.process_id == "run-1" and "weekly" in result.errors[0]
    assert publisher.events == []


def test_run_fails_without_configured_source(tmp_path: Path) -> None:
    """Feeds without an override or default source fail without statistics."""
    runner, _ = _runner(tmp_path, update_feed_uri=None)

    result = runner.handle({"feedType": "update"})

    assert result.status == "failed" and result.statistics is None


def test_run_fails_for_missing_local_source(tmp_path: Path) -> None:
    """Unopenable sources fail without statistics."""
    runner, _ = _runner(tmp_path)

    result = runner.handle({"sourceOverride": str(tmp_path / "missing.jsonl")})

    assert result.status == "failed" and result.statistics is None


def test_run_uses_feed_type_default_source(tmp_path: Path) -> None:
    """The full feed default source is used when no override is given."""
    runner, publisher = _runner(tmp_path, full_feed_uri=str(fixture_path("sample_feed.jsonl")))

    result = runner.handle({"feedType": "full"})

    assert result.status == "completed" and len(publisher.events) == 1


def test_run_generates_process_id(tmp_path: Path) -> None:
    """A run id is generated when none is supplied."""
    runner, publisher = _runner(tmp_path)

    result = runner.handle({"sourceOverride": str(fixture_path("sample_feed.jsonl"))})

    assert result.process_id and publisher.events[0].metadata.correlation_id == result.process_id


class _DroppedConnectionBody:
    def __init__(self, payload: bytes) -> None:
        self._payload = payload

    def read(self, amt: int) -> bytes:
        if not self._payload:
            raise ResponseStreamingError(error="connection reset")
        chunk, self._payload = self._payload[:amt], self._payload[amt:]
        return chunk

    def close(self) -> None:
        self._payload = b""


class _BodyS3Client:
    def __init__(self, body: Any) -> None:
        self._body = body

    def get_object(self, **kwargs: Any) -> dict[str, Any]:
        return {"Body": self._body}


def test_run_fails_when_s3_read_drops(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A dropped S3 connection mid-feed yields a failed result with statistics."""
    body = _DroppedConnectionBody(fixture_path("sample_feed.jsonl").read_bytes())
    monkeypatch.setattr(feed_source, "create_s3_client", lambda config: _BodyS3Client(body))
    runner, publisher = _runner(tmp_path)

    result = runner.handle({"sourceOverride": "s3://feeds/update.jsonl"})

    assert result.status == "failed" and result.statistics is not None
    assert result.statistics.total_lines == 3 and len(publisher.events) == 1
    assert "connection reset" in result.errors[-1]
