"""Read-only station reference table.

This module resolves feed TIPLOC codes to station identity.
Tables are loaded once per refresh cycle by an external job and
never mutated by the pipeline.
"""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable

from core.errors import RailFeedStoreError
from core.types import StationMapping
from store.default_stations import DEFAULT_STATION_MAPPINGS


class StationReferenceTable:
    """Immutable TIPLOC to station lookup."""

    def __init__(self, mappings: Iterable[StationMapping]) -> None:
        self._mappings = MappingProxyType(
            {mapping.tiploc_code: mapping for mapping in mappings}
        )

    def lookup(self, location_code: str) -> StationMapping | None:
        """Return the mapping for a location code, if any."""
        return self._mappings.get(location_code)

    def __contains__(self, location_code: object) -> bool:
        return location_code in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)


def default_station_table() -> StationReferenceTable:
    """Build the table from built-in reference data."""
    return StationReferenceTable(DEFAULT_STATION_MAPPINGS)


def load_station_table(stations_path: Path | None) -> StationReferenceTable:
    """Load a station table from JSON, or the built-in table when no path.

    Args:
        stations_path: Optional JSON file holding a list of mappings.

    Returns:
        Loaded station reference table.

    Raises:
        RailFeedStoreError: If the file is missing or invalid.
    """
    if stations_path is None:
        return default_station_table()
    if not stations_path.exists():
        raise RailFeedStoreError(
            f"Station reference file not found at {stations_path}. "
            "Set RAILFEED_STATIONS_PATH to an existing JSON file or unset it."
        )
    try:
        payload = json.loads(stations_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise RailFeedStoreError(
            f"Failed to read station reference file at {stations_path}: {error}. "
            "Fix the JSON content and retry."
        ) from error
    if not isinstance(payload, list):
        raise RailFeedStoreError(
            f"Invalid station reference file at {stations_path}: expected a JSON list."
        )
    return StationReferenceTable(
        _mapping_from_payload(stations_path, index, item) for index, item in enumerate(payload)
    )


def _mapping_from_payload(stations_path: Path, index: int, item: Any) -> StationMapping:
    """Parse one station mapping entry."""
    if not isinstance(item, dict):
        raise RailFeedStoreError(
            f"Invalid station entry {index} in {stations_path}: expected an object."
        )
    try:
        return StationMapping(
            tiploc_code=str(item["tiplocCode"]),
            station_code=str(item["stationCode"]),
            station_name=str(item["stationName"]),
            latitude=_optional_float(item.get("latitude")),
            longitude=_optional_float(item.get("longitude")),
            is_network_connection=bool(item.get("isEurostarConnection", False)),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise RailFeedStoreError(
            f"Invalid station entry {index} in {stations_path}: {error}. "
            "Each entry needs tiplocCode, stationCode, and stationName."
        ) from error


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)
