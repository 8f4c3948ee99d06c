"""Shared JSON serialization for events and results.

This module centralizes the wire format for published events and
invocation results. It is reused by publishers, the CLI, and tests.
"""

from __future__ import annotations

import json
from typing import Any

from core.types import (
    EventMetadata,
    PassagePoint,
    PathwayConfirmedEvent,
    ProcessResult,
    StatisticsSnapshot,
)


def event_to_payload(event: PathwayConfirmedEvent) -> dict[str, Any]:
    """Serialize an event into a JSON-safe payload.

    Args:
        event: Pathway-confirmed event.

    Returns:
        Dictionary payload using downstream wire field names.
    """
    return {
        "trainServiceNumber": event.train_service_number,
        "travelDate": event.travel_date,
        "origin": event.origin,
        "destination": event.destination,
        "passagePoints": [_passage_point_payload(point) for point in event.passage_points],
        "metadata": _metadata_payload(event.metadata),
    }


def event_from_payload(payload: dict[str, Any]) -> PathwayConfirmedEvent:
    """Deserialize a wire payload into an event.

    Args:
        payload: Serialized event payload.

    Returns:
        Parsed event.
    """
    metadata = payload.get("metadata") or {}
    return PathwayConfirmedEvent(
        train_service_number=str(payload.get("trainServiceNumber", "")),
        travel_date=str(payload.get("travelDate", "")),
        origin=str(payload.get("origin", "")),
        destination=str(payload.get("destination", "")),
        passage_points=tuple(
            PassagePoint(
                station_code=str(point.get("locationCode", "")),
                station_name=str(point.get("locationName", "")),
                arrival_time=point.get("arrivalTime"),
                departure_time=point.get("departureTime"),
                platform=point.get("platform"),
            )
            for point in payload.get("passagePoints", [])
        ),
        metadata=EventMetadata(
            domain=str(metadata.get("domain", "")),
            name=str(metadata.get("name", "")),
            correlation_id=str(metadata.get("correlationId", "")),
            timestamp=str(metadata.get("timestamp", "")),
        ),
    )


def event_to_json(event: PathwayConfirmedEvent) -> str:
    """Render an event as a compact JSON document."""
    return json.dumps(event_to_payload(event), sort_keys=True)


def statistics_to_payload(statistics: StatisticsSnapshot) -> dict[str, int]:
    """Serialize frozen statistics."""
    return {
        "totalLines": statistics.total_lines,
        "schedulesProcessed": statistics.schedules_processed,
        "schedulesFiltered": statistics.schedules_filtered,
        "eventsPublished": statistics.events_published,
        "duplicatesSkipped": statistics.duplicates_skipped,
        "parseErrors": statistics.parse_errors,
        "publishFailures": statistics.publish_failures,
        "processingTimeMs": statistics.processing_time_ms,
    }


def result_to_payload(result: ProcessResult) -> dict[str, Any]:
    """Serialize an invocation result for the trigger layer."""
    return {
        "processId": result.process_id,
        "status": result.status,
        "statistics": (
            statistics_to_payload(result.statistics) if result.statistics is not None else None
        ),
        "timestamp": result.timestamp.isoformat(),
        "errors": list(result.errors),
    }


def _passage_point_payload(point: PassagePoint) -> dict[str, Any]:
    return {
        "locationCode": point.station_code,
        "locationName": point.station_name,
        "arrivalTime": point.arrival_time,
        "departureTime": point.departure_time,
        "platform": point.platform,
    }


def _metadata_payload(metadata: EventMetadata) -> dict[str, str]:
    return {
        "domain": metadata.domain,
        "name": metadata.name,
        "correlationId": metadata.correlation_id,
        "timestamp": metadata.timestamp,
    }
