"""Typed invocation-request parsing.

This module validates trigger-layer requests, either as in-memory
mappings or as YAML/JSON request files, into ``InvocationRequest``.
Field names follow the wire format used by the trigger layer.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Mapping, cast

import yaml

from core.constants import SUPPORTED_FEED_TYPES
from core.errors import RailFeedRequestError
from core.types import DateRange, FeedType, InvocationRequest

_SUPPORTED_REQUEST_KEYS = ("feedType", "forceRefresh", "sourceOverride", "dateRange")


def load_invocation_request(request_path: str) -> InvocationRequest:
    """Load and validate a request file from disk.

    Args:
        request_path: Path to a YAML or JSON request document.

    Returns:
        Validated invocation request.

    Raises:
        RailFeedRequestError: If the file is missing, unparsable, or invalid.
    """
    return parse_invocation_request(read_request_payload(request_path))


def read_request_payload(request_path: str) -> object:
    """Read a request document without validating its fields.

    An empty document reads as an empty mapping.

    Raises:
        RailFeedRequestError: If the file is missing or unparsable.
    """
    request_file = Path(request_path).expanduser().resolve()
    if not request_file.exists():
        raise RailFeedRequestError(
            f"Request file does not exist at {request_file}. Provide a valid YAML or JSON file."
        )
    try:
        payload = cast(object, yaml.safe_load(request_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise RailFeedRequestError(
            f"Failed to read request file at {request_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise RailFeedRequestError(
            f"Failed to parse request file at {request_file}: {error}. Fix the syntax and retry."
        ) from error
    return {} if payload is None else payload


def parse_invocation_request(payload: object) -> InvocationRequest:
    """Validate a decoded request payload.

    Args:
        payload: Mapping with optional ``feedType``, ``forceRefresh``,
            ``sourceOverride``, and ``dateRange`` fields.

    Returns:
        Validated invocation request.

    Raises:
        RailFeedRequestError: If a field is missing, mistyped, or unsupported.
    """
    if not isinstance(payload, Mapping):
        raise RailFeedRequestError(
            f"Invalid request: expected a mapping, got {type(payload).__name__}."
        )
    unknown_keys = sorted(str(key) for key in payload if key not in _SUPPORTED_REQUEST_KEYS)
    if unknown_keys:
        raise RailFeedRequestError(
            f"Invalid request: unsupported field(s) {', '.join(unknown_keys)}. "
            f"Supported fields: {', '.join(_SUPPORTED_REQUEST_KEYS)}."
        )
    return InvocationRequest(
        feed_type=parse_feed_type(payload.get("feedType", "update")),
        force_refresh=_parse_bool(payload, "forceRefresh"),
        source_override=_parse_optional_string(payload, "sourceOverride"),
        date_range=_parse_date_range(payload.get("dateRange")),
    )


def parse_feed_type(value: object) -> FeedType:
    """Validate a feed type value.

    Raises:
        RailFeedRequestError: If the feed type is not supported.
    """
    if not isinstance(value, str) or value.strip().lower() not in SUPPORTED_FEED_TYPES:
        raise RailFeedRequestError(
            f"Unsupported feedType '{value}'. Use one of: {', '.join(SUPPORTED_FEED_TYPES)}."
        )
    return cast(FeedType, value.strip().lower())


def _parse_bool(payload: Mapping[str, object], field_name: str) -> bool:
    value = payload.get(field_name, False)
    if not isinstance(value, bool):
        raise RailFeedRequestError(f"Request field '{field_name}' must be a boolean.")
    return value


def _parse_optional_string(payload: Mapping[str, object], field_name: str) -> str | None:
    value = payload.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RailFeedRequestError(f"Request field '{field_name}' must be a string when provided.")
    stripped = value.strip()
    return stripped if stripped else None


def _parse_date_range(value: object) -> DateRange | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise RailFeedRequestError("Request field 'dateRange' must be a mapping with start/end.")
    start = _parse_date_bound(value, "start")
    end = _parse_date_bound(value, "end")
    if start is None and end is None:
        return None
    if start and end and start > end:
        raise RailFeedRequestError(
            f"Invalid dateRange: start {start} is after end {end}. Swap the bounds and retry."
        )
    return DateRange(start=start, end=end)


def _parse_date_bound(payload: Mapping[str, object], field_name: str) -> str | None:
    value = payload.get(field_name)
    # Unquoted YAML dates load as date objects.
    if isinstance(value, date):
        return value.isoformat()
    bound = _parse_optional_string(payload, field_name)
    if bound is None:
        return None
    try:
        return date.fromisoformat(bound).isoformat()
    except ValueError as error:
        raise RailFeedRequestError(
            f"Invalid dateRange.{field_name} '{bound}': expected YYYY-MM-DD."
        ) from error
