"""Pathway-confirmed event construction.

This module maps an eligible schedule onto the normalized event
consumed downstream. Only stops that resolve in the station table
become passage points; clock values are copied verbatim.
"""

from __future__ import annotations

from datetime import datetime, timezone

from core.constants import EVENT_DOMAIN, EVENT_NAME
from core.errors import RailFeedTransformError
from core.types import (
    EventMetadata,
    LocationStop,
    PassagePoint,
    PathwayConfirmedEvent,
    ScheduleRecord,
)
from store.station_reference import StationReferenceTable


def transform_schedule(
    record: ScheduleRecord,
    stations: StationReferenceTable,
    run_id: str,
    now: datetime | None = None,
) -> PathwayConfirmedEvent:
    """Build a pathway-confirmed event from a schedule.

    Args:
        record: Eligible schedule record.
        stations: Station reference table.
        run_id: Invocation id used as the event correlation id.
        now: Optional emission time, defaults to current UTC time.

    Returns:
        Immutable event with passage points in journey order.

    Raises:
        RailFeedTransformError: If no stop resolves to a station.
    """
    passage_points = tuple(
        point for point in (_passage_point(stop, stations) for stop in record.stops) if point
    )
    if not passage_points:
        raise RailFeedTransformError(
            f"Schedule {record.train_uid} ({record.start_date}) has no stops "
            "that resolve in the station reference table."
        )
    emitted_at = now or datetime.now(timezone.utc)
    return PathwayConfirmedEvent(
        train_service_number=record.train_uid,
        travel_date=record.start_date,
        origin=passage_points[0].station_code,
        destination=passage_points[-1].station_code,
        passage_points=passage_points,
        metadata=EventMetadata(
            domain=EVENT_DOMAIN,
            name=EVENT_NAME,
            correlation_id=run_id,
            timestamp=emitted_at.isoformat(),
        ),
    )


def _passage_point(stop: LocationStop, stations: StationReferenceTable) -> PassagePoint | None:
    """Map one stop, or return None when its code is unknown."""
    mapping = stations.lookup(stop.location_code)
    if mapping is None:
        return None
    return PassagePoint(
        station_code=mapping.station_code,
        station_name=mapping.station_name,
        arrival_time=stop.arrival or stop.public_arrival,
        departure_time=stop.departure or stop.public_departure,
        platform=stop.platform,
    )
