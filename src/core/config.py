"""Runtime configuration model for RailFeed.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_DEDUP_RETENTION_DAYS,
    DEFAULT_LOG_LEVEL,
    SUPPORTED_DEDUP_BACKENDS,
    SUPPORTED_PUBLISHERS,
)
from core.errors import RailFeedConfigError

_SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class RailFeedConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for dedup state and event files.
        aws_region: Optional default AWS region for boto3 clients.
        aws_profile: Optional AWS profile for boto3 session initialization.
        update_feed_uri: Default source for ``update`` feed runs.
        full_feed_uri: Default source for ``full`` feed runs.
        stations_path: Optional station reference JSON file.
        dedup_backend: Deduplication store backend name.
        dedup_table: DynamoDB table name for the ``dynamodb`` backend.
        dedup_retention_days: Retention horizon for dedup keys.
        publisher: Event publisher name.
        events_path: Output file for the ``jsonl`` publisher.
        sqs_queue_url: Queue URL for the ``sqs`` publisher.
        log_level: Minimum structured log level.
    """

    data_root: Path
    aws_region: str | None
    aws_profile: str | None
    update_feed_uri: str | None
    full_feed_uri: str | None
    stations_path: Path | None
    dedup_backend: str
    dedup_table: str | None
    dedup_retention_days: int
    publisher: str
    events_path: Path | None
    sqs_queue_url: str | None
    log_level: str

    @classmethod
    def from_env(cls) -> "RailFeedConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            RailFeedConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("RAILFEED_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        stations_value = os.getenv("RAILFEED_STATIONS_PATH")
        events_value = os.getenv("RAILFEED_EVENTS_PATH")
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            aws_region=os.getenv("RAILFEED_AWS_REGION"),
            aws_profile=os.getenv("RAILFEED_AWS_PROFILE"),
            update_feed_uri=os.getenv("RAILFEED_UPDATE_FEED_URI"),
            full_feed_uri=os.getenv("RAILFEED_FULL_FEED_URI"),
            stations_path=Path(stations_value).expanduser() if stations_value else None,
            dedup_backend=_parse_choice(
                "RAILFEED_DEDUP_BACKEND",
                os.getenv("RAILFEED_DEDUP_BACKEND", "file"),
                SUPPORTED_DEDUP_BACKENDS,
            ),
            dedup_table=os.getenv("RAILFEED_DEDUP_TABLE"),
            dedup_retention_days=_parse_retention_days(
                os.getenv("RAILFEED_DEDUP_RETENTION_DAYS", str(DEFAULT_DEDUP_RETENTION_DAYS))
            ),
            publisher=_parse_choice(
                "RAILFEED_PUBLISHER",
                os.getenv("RAILFEED_PUBLISHER", "log"),
                SUPPORTED_PUBLISHERS,
            ),
            events_path=Path(events_value).expanduser() if events_value else None,
            sqs_queue_url=os.getenv("RAILFEED_SQS_QUEUE_URL"),
            log_level=_parse_choice(
                "RAILFEED_LOG_LEVEL",
                os.getenv("RAILFEED_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
                _SUPPORTED_LOG_LEVELS,
            ),
        )


def _parse_retention_days(raw_value: str) -> int:
    """Parse the dedup retention environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive day count.

    Raises:
        RailFeedConfigError: If value is not a positive integer.
    """
    try:
        retention_days = int(raw_value)
    except ValueError as error:
        raise RailFeedConfigError(
            "Invalid RAILFEED_DEDUP_RETENTION_DAYS value: "
            f"expected integer, got '{raw_value}'. "
            "Set RAILFEED_DEDUP_RETENTION_DAYS to a whole number of days."
        ) from error
    if retention_days <= 0:
        raise RailFeedConfigError(
            "Invalid RAILFEED_DEDUP_RETENTION_DAYS value: "
            f"expected a positive day count, got {retention_days}."
        )
    return retention_days


def _parse_choice(env_name: str, raw_value: str, choices: tuple[str, ...]) -> str:
    """Validate an enumerated environment value."""
    value = raw_value.strip()
    if value not in choices:
        raise RailFeedConfigError(
            f"Invalid {env_name} value '{raw_value}'. "
            f"Use one of: {', '.join(choices)}."
        )
    return value
