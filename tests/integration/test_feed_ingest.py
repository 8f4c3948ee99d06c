"""Integration tests for end-to-end feed ingestion."""

from __future__ import annotations

import gzip
import json
from dataclasses import replace
from pathlib import Path

from core.config import RailFeedConfig
from core.types import InvocationRequest, PathwayConfirmedEvent
from ingest.pipeline import FeedIngestRunner, ingest_feed
from store.event_payload import event_from_payload
from tests.fixture_paths import fixture_path


def _config(tmp_path: Path) -> RailFeedConfig:
    return replace(
        RailFeedConfig.from_env(),
        data_root=tmp_path,
        dedup_backend="file",
        publisher="jsonl",
        events_path=tmp_path / "events.jsonl",
        stations_path=None,
    )


def _published_events(data_root: Path) -> list[PathwayConfirmedEvent]:
    """Read published events with run-specific metadata blanked."""
    events = []
    for line in (data_root / "events.jsonl").read_text(encoding="utf-8").splitlines():
        event = event_from_payload(json.loads(line))
        metadata = replace(event.metadata, correlation_id="", timestamp="")
        events.append(replace(event, metadata=metadata))
    return events


def test_sample_feed_publishes_one_event(tmp_path: Path) -> None:
    """The sample feed should publish exactly one pathway event."""
    config = _config(tmp_path)
    request = InvocationRequest(source_override=str(fixture_path("sample_feed.jsonl")))

    result = ingest_feed(request, config)

    events = [
        event_from_payload(json.loads(line))
        for line in (tmp_path / "events.jsonl").read_text(encoding="utf-8").splitlines()
    ]
    assert result.status == "completed" and result.statistics is not None
    statistics = result.statistics
    assert (
        statistics.total_lines,
        statistics.schedules_processed,
        statistics.schedules_filtered,
        statistics.events_published,
        statistics.duplicates_skipped,
        statistics.parse_errors,
    ) == (3, 1, 0, 1, 0, 0)
    assert len(events) == 1 and events[0].train_service_number == "W12345"
    assert (events[0].origin, events[0].destination) == ("EUS", "MAN")
    assert events[0].metadata.correlation_id == result.process_id


def test_repeat_runs_are_idempotent_until_forced(tmp_path: Path) -> None:
    """A second run skips the schedule; a forced run republishes it."""
    config = _config(tmp_path)
    source = str(fixture_path("sample_feed.jsonl"))

    first = FeedIngestRunner.from_config(config).run(InvocationRequest(source_override=source))
    second = FeedIngestRunner.from_config(config).run(InvocationRequest(source_override=source))
    forced = FeedIngestRunner.from_config(config).run(
        InvocationRequest(source_override=source, force_refresh=True)
    )

    assert first.statistics is not None and first.statistics.events_published == 1
    assert second.statistics is not None and second.statistics.duplicates_skipped == 1
    assert second.statistics.events_published == 0
    assert forced.statistics is not None and forced.statistics.events_published == 1
    assert len((tmp_path / "events.jsonl").read_text(encoding="utf-8").splitlines()) == 2


def test_gzip_and_plain_sources_are_equivalent(tmp_path: Path) -> None:
    """Compressed and plain copies of a feed produce the same counts."""
    plain_source = fixture_path("sample_feed.jsonl")
    gzip_source = tmp_path / "sample_feed.jsonl.gz"
    gzip_source.write_bytes(gzip.compress(plain_source.read_bytes()))

    plain = ingest_feed(
        InvocationRequest(source_override=str(plain_source)), _config(tmp_path / "plain")
    )
    compressed = ingest_feed(
        InvocationRequest(source_override=str(gzip_source)), _config(tmp_path / "gzip")
    )

    assert plain.statistics is not None and compressed.statistics is not None
    assert replace(plain.statistics, processing_time_ms=0) == replace(
        compressed.statistics, processing_time_ms=0
    )
    assert _published_events(tmp_path / "plain") == _published_events(tmp_path / "gzip")
    assert len(_published_events(tmp_path / "plain")) == 1


def test_malformed_lines_do_not_abort_run(tmp_path: Path) -> None:
    """Bad lines are counted while valid schedules still publish."""
    source = tmp_path / "mixed.jsonl"
    lines = fixture_path("sample_feed.jsonl").read_text(encoding="utf-8").splitlines()
    source.write_text("\n".join(["{broken", *lines, '"just a string"']) + "\n", encoding="utf-8")

    result = ingest_feed(InvocationRequest(source_override=str(source)), _config(tmp_path))

    assert result.status == "completed" and result.statistics is not None
    assert result.statistics.parse_errors == 2
    assert result.statistics.events_published == 1
    assert result.errors[0].startswith("Line 1:") and result.errors[1].startswith("Line 5:")
