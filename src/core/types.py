"""Shared typed models.

This module defines the data models used by decoding, filtering,
transformation, dedup, and publishing layers to keep interfaces
explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Union

StopPosition = Literal["origin", "intermediate", "terminating"]
FeedType = Literal["update", "full"]
ProcessStatus = Literal["completed", "partial", "failed"]


@dataclass(frozen=True)
class LocationStop:
    """One timing point of a schedule, in journey order.

    Attributes:
        location_code: TIPLOC code of the timing point.
        arrival: Working arrival clock value, verbatim.
        departure: Working departure clock value, verbatim.
        public_arrival: Public arrival clock value, verbatim.
        public_departure: Public departure clock value, verbatim.
        platform: Platform identifier when published.
        position: Origin, intermediate, or terminating stop.
    """

    location_code: str
    arrival: str | None = None
    departure: str | None = None
    public_arrival: str | None = None
    public_departure: str | None = None
    platform: str | None = None
    position: StopPosition = "intermediate"


@dataclass(frozen=True)
class ScheduleRecord:
    """Decoded ``JsonScheduleV1`` record.

    Attributes:
        train_uid: Train identifier (``CIF_train_uid``).
        stp_indicator: One of ``N``, ``P``, ``O``, ``C``.
        start_date: Validity start date, ISO ``YYYY-MM-DD`` as in the feed.
        end_date: Validity end date, ISO ``YYYY-MM-DD`` as in the feed.
        run_days: Seven run flags, Monday through Sunday.
        operator_code: ATOC operator code.
        stops: Ordered timing points; first is origin, last is destination.
        train_status: Optional CIF train status.
        train_category: Optional CIF train category.
    """

    train_uid: str
    stp_indicator: str
    start_date: str
    end_date: str
    run_days: tuple[bool, ...]
    operator_code: str | None
    stops: tuple[LocationStop, ...]
    train_status: str | None = None
    train_category: str | None = None


@dataclass(frozen=True)
class TimetableHeader:
    """Decoded ``JsonTimetableV1`` header record."""

    classification: str | None
    timestamp: int | None
    owner: str | None


@dataclass(frozen=True)
class AssociationRecord:
    """Decoded ``JsonAssociationV1`` record."""

    main_train_uid: str | None
    assoc_train_uid: str | None
    assoc_start_date: str | None
    category: str | None
    location: str | None


@dataclass(frozen=True)
class UnrecognizedRecord:
    """Valid feed envelope with no record kind this pipeline knows."""

    keys: tuple[str, ...]


DecodedRecord = Union[ScheduleRecord, TimetableHeader, AssociationRecord, UnrecognizedRecord]


@dataclass(frozen=True)
class DecodeFailure:
    """Recoverable parse failure for one feed line.

    Attributes:
        line_number: One-based ordinal of the offending line.
        message: Underlying parser message.
    """

    line_number: int
    message: str


@dataclass(frozen=True)
class StationMapping:
    """Reference data for one TIPLOC code.

    Attributes:
        tiploc_code: Feed location code.
        station_code: Three-letter station code.
        station_name: Display name.
        latitude: Optional latitude in degrees.
        longitude: Optional longitude in degrees.
        is_network_connection: Whether the station connects to the
            international network of interest.
    """

    tiploc_code: str
    station_code: str
    station_name: str
    latitude: float | None = None
    longitude: float | None = None
    is_network_connection: bool = False


@dataclass(frozen=True)
class PassagePoint:
    """One mapped stop on a published journey."""

    station_code: str
    station_name: str
    arrival_time: str | None
    departure_time: str | None
    platform: str | None


@dataclass(frozen=True)
class EventMetadata:
    """Envelope metadata attached to every published event."""

    domain: str
    name: str
    correlation_id: str
    timestamp: str


@dataclass(frozen=True)
class PathwayConfirmedEvent:
    """Normalized pathway-confirmed event for downstream consumers.

    Attributes:
        train_service_number: Train identifier from the schedule.
        travel_date: Schedule validity start date.
        origin: Station code of the first mapped passage point.
        destination: Station code of the last mapped passage point.
        passage_points: Mapped stops in journey order.
        metadata: Domain, name, correlation id, and emission timestamp.
    """

    train_service_number: str
    travel_date: str
    origin: str
    destination: str
    passage_points: tuple[PassagePoint, ...]
    metadata: EventMetadata


@dataclass(frozen=True)
class DateRange:
    """Inclusive ISO date window applied to schedule start dates."""

    start: str | None = None
    end: str | None = None

    def contains(self, iso_date: str) -> bool:
        """Return whether an ISO date string falls inside the window."""
        if self.start and iso_date < self.start:
            return False
        if self.end and iso_date > self.end:
            return False
        return True


@dataclass(frozen=True)
class InvocationRequest:
    """Request consumed from the trigger layer.

    Attributes:
        feed_type: ``update`` or ``full`` feed variant.
        force_refresh: Bypass dedup checks while still recording keys.
        source_override: Optional source path or URI replacing the default.
        date_range: Optional start-date window for schedules.
    """

    feed_type: FeedType = "update"
    force_refresh: bool = False
    source_override: str | None = None
    date_range: DateRange | None = None


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Frozen processing statistics returned with a result."""

    total_lines: int
    schedules_processed: int
    schedules_filtered: int
    events_published: int
    duplicates_skipped: int
    parse_errors: int
    publish_failures: int
    processing_time_ms: int


@dataclass
class ProcessingStatistics:
    """Mutable accumulator owned by one processor invocation."""

    total_lines: int = 0
    schedules_processed: int = 0
    schedules_filtered: int = 0
    events_published: int = 0
    duplicates_skipped: int = 0
    parse_errors: int = 0
    publish_failures: int = 0
    processing_time_ms: int = 0

    def freeze(self) -> StatisticsSnapshot:
        """Return an immutable copy of current counters."""
        return StatisticsSnapshot(
            total_lines=self.total_lines,
            schedules_processed=self.schedules_processed,
            schedules_filtered=self.schedules_filtered,
            events_published=self.events_published,
            duplicates_skipped=self.duplicates_skipped,
            parse_errors=self.parse_errors,
            publish_failures=self.publish_failures,
            processing_time_ms=self.processing_time_ms,
        )


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one feed processing invocation.

    Attributes:
        process_id: Run identifier of the invocation.
        status: ``completed``, ``partial``, or ``failed``.
        statistics: Frozen counters, or None when the request was rejected.
        errors: Bounded sample of error messages.
        timestamp: UTC completion time.
    """

    process_id: str
    status: ProcessStatus
    statistics: StatisticsSnapshot | None
    errors: tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
