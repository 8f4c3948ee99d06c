"""Public SDK surface for RailFeed.

This module provides a stable import path for pipeline users.
It re-exports the runner, processor, boundaries, and typed models.
"""

from __future__ import annotations

from core.config import RailFeedConfig
from core.invocation_request import load_invocation_request, parse_invocation_request
from core.types import (
    DateRange,
    InvocationRequest,
    PathwayConfirmedEvent,
    ProcessResult,
    ScheduleRecord,
    StationMapping,
    StatisticsSnapshot,
)
from ingest.cancellation import CancellationToken
from ingest.pipeline import FeedIngestRunner, ingest_feed
from ingest.stream_processor import FeedStreamProcessor
from store.dedup_store import DedupStore, InMemoryDedupStore, JsonFileDedupStore
from store.dynamodb_dedup_store import DynamoDbDedupStore
from store.publishers import (
    EventPublisher,
    InMemoryPublisher,
    JsonlFilePublisher,
    LoggingPublisher,
    SqsPublisher,
)
from store.station_reference import StationReferenceTable, default_station_table, load_station_table

__all__ = [
    "CancellationToken",
    "DateRange",
    "DedupStore",
    "DynamoDbDedupStore",
    "EventPublisher",
    "FeedIngestRunner",
    "FeedStreamProcessor",
    "InMemoryDedupStore",
    "InMemoryPublisher",
    "InvocationRequest",
    "JsonFileDedupStore",
    "JsonlFilePublisher",
    "LoggingPublisher",
    "PathwayConfirmedEvent",
    "ProcessResult",
    "RailFeedConfig",
    "ScheduleRecord",
    "SqsPublisher",
    "StationMapping",
    "StationReferenceTable",
    "StatisticsSnapshot",
    "default_station_table",
    "ingest_feed",
    "load_invocation_request",
    "load_station_table",
    "parse_invocation_request",
]
