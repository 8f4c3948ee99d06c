"""Unit tests for event and result serialization."""

from __future__ import annotations

from datetime import datetime, timezone

from core.types import ProcessResult, StatisticsSnapshot
from store.event_payload import result_to_payload


def test_result_to_payload_uses_wire_field_names() -> None:
    """Results serialize with camelCase statistics."""
    result = ProcessResult(
        process_id="run-1",
        status="completed",
        statistics=StatisticsSnapshot(3, 1, 0, 1, 0, 0, 0, 12),
        timestamp=datetime(2024, 1, 10, tzinfo=timezone.utc),
    )

    payload = result_to_payload(result)

    assert payload["processId"] == "run-1"
    assert payload["statistics"]["totalLines"] == 3
    assert payload["statistics"]["eventsPublished"] == 1
    assert payload["timestamp"] == "2024-01-10T00:00:00+00:00"


def test_result_to_payload_keeps_missing_statistics_null() -> None:
    """Rejected requests serialize statistics as null."""
    result = ProcessResult(process_id="run-1", status="failed", statistics=None, errors=("bad",))

    assert result_to_payload(result)["statistics"] is None
