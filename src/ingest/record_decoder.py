"""CIF feed line decoding.

This module turns one decompressed feed line into a typed record.
The JSON envelope is resolved once here into a tagged record variant,
so downstream stages never inspect raw envelopes.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from core.constants import (
    ASSOCIATION_RECORD_KEY,
    INTERMEDIATE_LOCATION_TYPE,
    ORIGIN_LOCATION_TYPE,
    RUN_DAYS_LENGTH,
    SCHEDULE_RECORD_KEY,
    TERMINATING_LOCATION_TYPE,
    TIMETABLE_RECORD_KEY,
)
from core.errors import RailFeedDecodeError
from core.types import (
    AssociationRecord,
    DecodedRecord,
    DecodeFailure,
    LocationStop,
    ScheduleRecord,
    StopPosition,
    TimetableHeader,
    UnrecognizedRecord,
)

_POSITION_BY_LOCATION_TYPE: dict[str, StopPosition] = {
    ORIGIN_LOCATION_TYPE: "origin",
    INTERMEDIATE_LOCATION_TYPE: "intermediate",
    TERMINATING_LOCATION_TYPE: "terminating",
}


def decode_line(line: str, line_number: int) -> DecodedRecord | DecodeFailure:
    """Decode one feed line into a record variant.

    Callers skip blank lines before decoding. Unknown envelope shapes
    decode to ``UnrecognizedRecord``; only structural problems fail.

    Args:
        line: One line of feed text without its terminator.
        line_number: One-based position of the line in the feed.

    Returns:
        Decoded record, or a ``DecodeFailure`` describing the problem.
    """
    try:
        envelope = json.loads(line)
    except json.JSONDecodeError as error:
        return DecodeFailure(line_number=line_number, message=f"invalid JSON: {error.msg}")
    if not isinstance(envelope, dict):
        return DecodeFailure(
            line_number=line_number,
            message=f"expected JSON object envelope, got {type(envelope).__name__}",
        )
    try:
        return _decode_envelope(envelope)
    except RailFeedDecodeError as error:
        return DecodeFailure(line_number=line_number, message=str(error))


def decode_schedule(payload: Mapping[str, Any]) -> ScheduleRecord:
    """Decode a bare ``JsonScheduleV1`` object.

    Args:
        payload: Schedule object as found under the ``JsonScheduleV1`` key.

    Returns:
        Typed schedule record.

    Raises:
        RailFeedDecodeError: If required fields are missing or mistyped.
    """
    if not isinstance(payload, Mapping):
        raise RailFeedDecodeError(f"{SCHEDULE_RECORD_KEY} must be an object")
    raw_locations = _schedule_locations(payload)
    stops = tuple(
        _decode_location(raw_location, index, len(raw_locations))
        for index, raw_location in enumerate(raw_locations)
    )
    return ScheduleRecord(
        train_uid=_required_string(payload, "CIF_train_uid"),
        stp_indicator=_optional_string(payload, "CIF_stp_indicator") or "",
        start_date=_optional_string(payload, "schedule_start_date") or "",
        end_date=_optional_string(payload, "schedule_end_date") or "",
        run_days=_decode_run_days(_optional_string(payload, "schedule_days_runs")),
        operator_code=_optional_string(payload, "atoc_code"),
        stops=stops,
        train_status=_optional_string(payload, "train_status"),
        train_category=(
            _optional_string(payload, "train_category")
            or _segment_string(payload, "CIF_train_category")
        ),
    )


def _decode_envelope(envelope: Mapping[str, Any]) -> DecodedRecord:
    if envelope.get(SCHEDULE_RECORD_KEY) is not None:
        return decode_schedule(envelope[SCHEDULE_RECORD_KEY])
    if envelope.get(TIMETABLE_RECORD_KEY) is not None:
        return _decode_timetable(envelope[TIMETABLE_RECORD_KEY])
    if envelope.get(ASSOCIATION_RECORD_KEY) is not None:
        return _decode_association(envelope[ASSOCIATION_RECORD_KEY])
    return UnrecognizedRecord(keys=tuple(sorted(str(key) for key in envelope)))


def _decode_timetable(payload: Any) -> TimetableHeader:
    if not isinstance(payload, Mapping):
        raise RailFeedDecodeError(f"{TIMETABLE_RECORD_KEY} must be an object")
    timestamp = payload.get("timestamp")
    if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, int)):
        raise RailFeedDecodeError(f"{TIMETABLE_RECORD_KEY}.timestamp must be an integer")
    return TimetableHeader(
        classification=_optional_string(payload, "classification"),
        timestamp=timestamp,
        owner=_optional_string(payload, "owner"),
    )


def _decode_association(payload: Any) -> AssociationRecord:
    if not isinstance(payload, Mapping):
        raise RailFeedDecodeError(f"{ASSOCIATION_RECORD_KEY} must be an object")
    return AssociationRecord(
        main_train_uid=_optional_string(payload, "main_train_uid"),
        assoc_train_uid=_optional_string(payload, "assoc_train_uid"),
        assoc_start_date=_optional_string(payload, "assoc_start_date"),
        category=_optional_string(payload, "category"),
        location=_optional_string(payload, "location"),
    )


def _schedule_locations(payload: Mapping[str, Any]) -> list[Any]:
    """Return raw location entries from flat or segment-nested layouts."""
    raw_locations = payload.get("schedule_location")
    segment = payload.get("schedule_segment")
    if raw_locations is None and isinstance(segment, Mapping):
        raw_locations = segment.get("schedule_location")
    if raw_locations is None:
        return []
    if not isinstance(raw_locations, list):
        raise RailFeedDecodeError("schedule_location must be a list")
    return raw_locations


def _segment_string(payload: Mapping[str, Any], field_name: str) -> str | None:
    """Read a string field nested under ``schedule_segment``."""
    segment = payload.get("schedule_segment")
    if not isinstance(segment, Mapping):
        return None
    return _optional_string(segment, field_name)


def _decode_location(raw_location: Any, index: int, count: int) -> LocationStop:
    if not isinstance(raw_location, Mapping):
        raise RailFeedDecodeError(f"schedule_location[{index}] must be an object")
    location_code = _optional_string(raw_location, "tiploc_code")
    if not location_code:
        raise RailFeedDecodeError(f"schedule_location[{index}] is missing tiploc_code")
    return LocationStop(
        location_code=location_code,
        arrival=_optional_string(raw_location, "arrival"),
        departure=_optional_string(raw_location, "departure"),
        public_arrival=_optional_string(raw_location, "public_arrival"),
        public_departure=_optional_string(raw_location, "public_departure"),
        platform=_optional_string(raw_location, "platform"),
        position=_stop_position(raw_location, index, count),
    )


def _stop_position(raw_location: Mapping[str, Any], index: int, count: int) -> StopPosition:
    location_type = raw_location.get("location_type") or raw_location.get("record_identity")
    if isinstance(location_type, str) and location_type in _POSITION_BY_LOCATION_TYPE:
        return _POSITION_BY_LOCATION_TYPE[location_type]
    if index == 0:
        return "origin"
    if index == count - 1:
        return "terminating"
    return "intermediate"


def _decode_run_days(mask: str | None) -> tuple[bool, ...]:
    """Decode a Monday-first ``1111100`` run-days mask."""
    if not mask:
        return (False,) * RUN_DAYS_LENGTH
    if len(mask) != RUN_DAYS_LENGTH or any(flag not in "01" for flag in mask):
        raise RailFeedDecodeError(
            f"schedule_days_runs must be {RUN_DAYS_LENGTH} characters of 0/1, got '{mask}'"
        )
    return tuple(flag == "1" for flag in mask)


def _required_string(payload: Mapping[str, Any], field_name: str) -> str:
    value = _optional_string(payload, field_name)
    if not value:
        raise RailFeedDecodeError(f"{SCHEDULE_RECORD_KEY} is missing {field_name}")
    return value


def _optional_string(payload: Mapping[str, Any], field_name: str) -> str | None:
    value = payload.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RailFeedDecodeError(f"{field_name} must be a string, got {type(value).__name__}")
    return value
