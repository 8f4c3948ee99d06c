"""Unit tests for shared typed models."""

from __future__ import annotations

from core.types import DateRange, ProcessingStatistics


def test_date_range_bounds_are_inclusive() -> None:
    """Both bounds of a date range should be inclusive."""
    date_range = DateRange(start="2024-01-01", end="2024-01-31")

    assert date_range.contains("2024-01-01") and date_range.contains("2024-01-31")
    assert not date_range.contains("2023-12-31") and not date_range.contains("2024-02-01")


def test_date_range_open_ended() -> None:
    """Missing bounds should not restrict dates."""
    assert DateRange(start="2024-01-01").contains("2099-12-31")


def test_freeze_is_unaffected_by_later_updates() -> None:
    """Frozen snapshots should not change when counters move on."""
    statistics = ProcessingStatistics(total_lines=2)
    snapshot = statistics.freeze()
    statistics.total_lines += 1

    assert snapshot.total_lines == 2
