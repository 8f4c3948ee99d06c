"""Schedule eligibility rules.

This module decides whether a decoded schedule is published.
Rules run in a fixed order and the first failing rule names the
rejection reason. Rejections are expected steady-state outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import PERMANENT_STP_INDICATOR
from core.types import DateRange, ScheduleRecord
from store.station_reference import StationReferenceTable

ELIGIBLE_REASON = "eligible"
STP_REASON = "stp_indicator_not_permanent"
NO_LOCATIONS_REASON = "no_locations"
NO_MAPPED_LOCATIONS_REASON = "no_mapped_locations"
OUTSIDE_DATE_RANGE_REASON = "outside_date_range"


@dataclass(frozen=True)
class FilterDecision:
    """Eligibility verdict with the deciding rule."""

    eligible: bool
    reason: str


def evaluate_schedule(
    record: ScheduleRecord,
    stations: StationReferenceTable,
    date_range: DateRange | None = None,
) -> FilterDecision:
    """Apply eligibility rules to one schedule.

    Args:
        record: Decoded schedule record.
        stations: Station reference table.
        date_range: Optional start-date window requested by the caller.

    Returns:
        Filter decision; ``reason`` names the first failing rule.
    """
    if record.stp_indicator != PERMANENT_STP_INDICATOR:
        return FilterDecision(eligible=False, reason=STP_REASON)
    if not record.stops:
        return FilterDecision(eligible=False, reason=NO_LOCATIONS_REASON)
    if not any(stop.location_code in stations for stop in record.stops):
        return FilterDecision(eligible=False, reason=NO_MAPPED_LOCATIONS_REASON)
    if date_range is not None and not date_range.contains(record.start_date):
        return FilterDecision(eligible=False, reason=OUTSIDE_DATE_RANGE_REASON)
    return FilterDecision(eligible=True, reason=ELIGIBLE_REASON)
