"""Unit tests for feed stream processing."""

from __future__ import annotations

import gzip
import io
import json
from datetime import datetime
from typing import Any

from botocore.exceptions import IncompleteReadError, ResponseStreamingError

from core.errors import RailFeedPublishError, RailFeedStoreError
from core.types import DateRange, PathwayConfirmedEvent
from ingest.cancellation import CancellationToken
from ingest.stream_processor import FeedStreamProcessor
from store.dedup_store import InMemoryDedupStore
from store.publishers import InMemoryPublisher
from store.station_reference import default_station_table

_HEADER = json.dumps({"JsonTimetableV1": {"timestamp": 1700000000, "owner": "Network Rail"}})


def _schedule(train_uid: str, stp_indicator: str = "N", start_date: str = "2024-01-15") -> str:
    return json.dumps(
        {
            "JsonScheduleV1": {
                "CIF_train_uid": train_uid,
                "CIF_stp_indicator": stp_indicator,
                "schedule_start_date": start_date,
                "schedule_end_date": "2024-06-30",
                "schedule_days_runs": "1111100",
                "schedule_location": [
                    {"tiploc_code": "EUSTON", "location_type": "LO", "departure": "0800"},
                    {"tiploc_code": "MNCRPIC", "location_type": "LT", "arrival": "1005"},
                ],
            }
        }
    )


def _processor(
    dedup_store: object | None = None,
    publisher: object | None = None,
    max_errors: int = 100,
) -> FeedStreamProcessor:
    return FeedStreamProcessor(
        default_station_table(),
        dedup_store if dedup_store is not None else InMemoryDedupStore(),  # type: ignore[arg-type]
        publisher if publisher is not None else InMemoryPublisher(),  # type: ignore[arg-type]
        max_errors=max_errors,
    )


class _FailingPublisher:
    def publish(self, event: PathwayConfirmedEvent) -> None:
        raise RailFeedPublishError(f"queue unavailable for {event.train_service_number}")


class _FailingDedupStore:
    def exists(self, key: str) -> bool:
        raise RailFeedStoreError(f"table unavailable for {key}")

    def record(self, key: str, processed_at: datetime, run_id: str) -> None:
        raise AssertionError("record should not be reached")


class _CancellingPublisher(InMemoryPublisher):
    def __init__(self, token: CancellationToken) -> None:
        super().__init__()
        self._token = token

    def publish(self, event: PathwayConfirmedEvent) -> None:
        super().publish(event)
        self._token.cancel()


class _BrokenBody(io.RawIOBase):
    """Raw body that serves its payload, then fails the next read."""

    def __init__(self, payload: bytes, error: Exception) -> None:
        self._payload = payload
        self._error = error

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if not self._payload:
            raise self._error
        count = min(len(buffer), len(self._payload))
        buffer[:count] = self._payload[:count]
        self._payload = self._payload[count:]
        return count


def test_process_content_publishes_permanent_schedule() -> None:
    """An eligible schedule should produce one event and record its key."""
    store = InMemoryDedupStore()
    publisher = InMemoryPublisher()

    result = _processor(store, publisher).process_content(
        "\n".join([_HEADER, _schedule("W12345")]), "run-1"
    )

    assert result.status == "completed" and result.statistics is not None
    assert result.statistics.events_published == 1
    assert publisher.events[0].metadata.correlation_id == "run-1"
    assert store.run_id_for("W12345_2024-01-15") == "run-1"


def test_process_content_filters_non_permanent_schedules() -> None:
    """Overlay, cancellation, and provisional schedules are filtered."""
    content = "\n".join(_schedule(f"X{index}", stp) for index, stp in enumerate("POC"))

    result = _processor().process_content(content, "run-1")

    assert result.statistics is not None
    assert (result.statistics.schedules_filtered, result.statistics.events_published) == (3, 0)


def test_process_content_skips_duplicates_unless_forced() -> None:
    """Recorded keys are skipped; forced runs publish them again."""
    store = InMemoryDedupStore()
    content = _schedule("W12345")
    processor = _processor(store)

    first = processor.process_content(content, "run-1")
    second = processor.process_content(content, "run-2")
    forced = processor.process_content(content, "run-3", force_refresh=True)

    assert first.statistics is not None and first.statistics.events_published == 1
    assert second.statistics is not None and second.statistics.duplicates_skipped == 1
    assert second.statistics.events_published == 0
    assert forced.statistics is not None and forced.statistics.events_published == 1
    assert forced.statistics.duplicates_skipped == 0
    assert store.run_id_for("W12345_2024-01-15") == "run-3"


def test_process_content_counts_parse_errors_and_continues() -> None:
    """Malformed lines are counted and later lines still processed."""
    content = "\n".join([_schedule("A1"), "{bad json", "", _schedule("A2", start_date="2024-01-16")])

    result = _processor().process_content(content, "run-1")

    assert result.statistics is not None
    assert result.statistics.total_lines == 3
    assert result.statistics.parse_errors == 1
    assert result.statistics.events_published == 2
    assert result.errors[0].startswith("Line 2: invalid JSON")


def test_process_content_caps_error_sample() -> None:
    """Error messages are sampled while the count stays exact."""
    content = "\n".join(["{bad"] * 5)

    result = _processor(max_errors=2).process_content(content, "run-1")

    assert result.statistics is not None and result.statistics.parse_errors == 5
    assert len(result.errors) == 2


def test_process_content_counts_publish_failures() -> None:
    """Publish failures are counted and the key is not recorded."""
    store = InMemoryDedupStore()

    result = _processor(store, _FailingPublisher()).process_content(_schedule("W1"), "run-1")

    assert result.status == "completed" and result.statistics is not None
    assert result.statistics.publish_failures == 1
    assert result.statistics.events_published == 0
    assert len(store) == 0
    assert result.errors[0].startswith("Publish failed for W1_2024-01-15")


def test_process_content_fails_on_dedup_store_error() -> None:
    """Dedup store errors end the run as failed with partial statistics."""
    result = _processor(_FailingDedupStore()).process_content(_schedule("W1"), "run-1")

    assert result.status == "failed" and result.statistics is not None
    assert result.statistics.schedules_processed == 1
    assert result.errors[-1].startswith("Dedup store error")


def test_process_content_applies_date_range() -> None:
    """Schedules starting outside the window are filtered."""
    content = "\n".join([_schedule("A1", start_date="2024-01-10"), _schedule("A2")])

    result = _processor().process_content(
        content, "run-1", date_range=DateRange(start="2024-01-15")
    )

    assert result.statistics is not None
    assert (result.statistics.schedules_filtered, result.statistics.events_published) == (1, 1)


def test_process_stream_stops_between_lines_when_cancelled() -> None:
    """Cancellation should yield a partial result."""
    token = CancellationToken()
    publisher = _CancellingPublisher(token)
    content = "\n".join([_HEADER, _schedule("A1"), _schedule("A2")])

    result = _processor(publisher=publisher).process_content(
        content, "run-1", cancellation=token
    )

    assert result.status == "partial" and result.statistics is not None
    assert result.statistics.total_lines == 2 and len(publisher.events) == 1
    assert result.errors[-1] == "Processing cancelled after 2 lines"


def test_process_stream_fails_on_corrupt_gzip() -> None:
    """A gzip stream with a corrupt header fails the invocation."""
    stream = io.BytesIO(b"\x1f\x8bnot really gzip")

    result = _processor().process_stream(stream, "run-1")

    assert result.status == "failed" and result.statistics is not None
    assert result.errors[-1].startswith("Stream processing error")


def test_process_stream_reads_gzip_feed() -> None:
    """Gzip feeds produce the same statistics as plain feeds."""
    content = "\n".join([_HEADER, _schedule("A1")]) + "\n"

    plain = _processor().process_content(content, "run-1")
    compressed = _processor().process_stream(io.BytesIO(gzip.compress(content.encode())), "run-2")

    assert plain.statistics is not None and compressed.statistics is not None
    assert plain.statistics.events_published == compressed.statistics.events_published == 1
    assert plain.statistics.total_lines == compressed.statistics.total_lines == 2


def test_process_content_publishes_in_feed_order() -> None:
    """Events are published in the order schedules appear."""
    publisher = InMemoryPublisher()
    content = "\n".join(_schedule(train_uid) for train_uid in ("C3", "A1", "B2"))

    _processor(publisher=publisher).process_content(content, "run-1")

    assert [event.train_service_number for event in publisher.events] == ["C3", "A1", "B2"]


def test_process_stream_fails_on_connection_reset_mid_read() -> None:
    """A botocore streaming error ends the run as failed with statistics so far."""
    content = ("\n".join([_HEADER, _schedule("A1")]) + "\n").encode()
    error = ResponseStreamingError(error="connection reset")
    publisher = InMemoryPublisher()

    result = _processor(publisher=publisher).process_stream(
        io.BufferedReader(_BrokenBody(content, error)), "run-1"
    )

    assert result.status == "failed" and result.statistics is not None
    assert result.statistics.events_published == len(publisher.events) == 1
    assert result.errors[-1].startswith("Stream processing error")


def test_process_stream_fails_on_truncated_body() -> None:
    """A truncated response body ends the run as failed."""
    error = IncompleteReadError(actual_bytes=10, expected_bytes=20)

    result = _processor().process_stream(
        io.BufferedReader(_BrokenBody(_HEADER.encode(), error)), "run-1"
    )

    assert result.status == "failed" and result.statistics is not None
