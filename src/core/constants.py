"""Core constants used across RailFeed modules.

This module centralizes feed, event, and runtime constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".railfeed")
DEDUP_FILE_NAME = "dedup_keys.jsonl"
DEFAULT_EVENTS_FILE_NAME = "events.jsonl"
DEFAULT_DEDUP_RETENTION_DAYS = 30
DEFAULT_LOG_LEVEL = "INFO"
GZIP_MAGIC = b"\x1f\x8b"
FEED_TEXT_ENCODING = "utf-8"
MAX_RESULT_ERRORS = 100
SCHEDULE_RECORD_KEY = "JsonScheduleV1"
TIMETABLE_RECORD_KEY = "JsonTimetableV1"
ASSOCIATION_RECORD_KEY = "JsonAssociationV1"
PERMANENT_STP_INDICATOR = "N"
RUN_DAYS_LENGTH = 7
SUPPORTED_FEED_TYPES = ("update", "full")
SUPPORTED_DEDUP_BACKENDS = ("memory", "file", "dynamodb")
SUPPORTED_PUBLISHERS = ("log", "jsonl", "sqs")
EVENT_DOMAIN = "planning.short_term"
EVENT_NAME = "InfrastructurePathwayConfirmed"
ORIGIN_LOCATION_TYPE = "LO"
INTERMEDIATE_LOCATION_TYPE = "LI"
TERMINATING_LOCATION_TYPE = "LT"
DEFAULT_SAMPLE_RECORD_COUNT = 50
