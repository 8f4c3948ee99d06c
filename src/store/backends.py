"""Factories for the configured dedup store and publisher.

Backends are chosen by ``RAILFEED_DEDUP_BACKEND`` and
``RAILFEED_PUBLISHER``; the processor never knows which is wired in.
"""

from __future__ import annotations

from datetime import timedelta

from core.config import RailFeedConfig
from core.constants import DEFAULT_EVENTS_FILE_NAME
from core.errors import RailFeedConfigError
from store.aws_clients import create_dynamodb_table, create_sqs_client
from store.dedup_store import DedupStore, InMemoryDedupStore, JsonFileDedupStore
from store.dynamodb_dedup_store import DynamoDbDedupStore
from store.publishers import EventPublisher, JsonlFilePublisher, LoggingPublisher, SqsPublisher


def build_dedup_store(config: RailFeedConfig) -> DedupStore:
    """Build the dedup store selected by configuration.

    Args:
        config: Runtime configuration.

    Returns:
        Dedup store instance.

    Raises:
        RailFeedConfigError: If the backend is missing required settings.
    """
    retention = timedelta(days=config.dedup_retention_days)
    if config.dedup_backend == "memory":
        return InMemoryDedupStore(retention)
    if config.dedup_backend == "dynamodb":
        if not config.dedup_table:
            raise RailFeedConfigError(
                "RAILFEED_DEDUP_BACKEND=dynamodb requires RAILFEED_DEDUP_TABLE. "
                "Set it to the dedup table name."
            )
        return DynamoDbDedupStore(create_dynamodb_table(config, config.dedup_table), retention)
    return JsonFileDedupStore(config.data_root, retention)


def build_publisher(config: RailFeedConfig) -> EventPublisher:
    """Build the event publisher selected by configuration.

    Args:
        config: Runtime configuration.

    Returns:
        Publisher instance.

    Raises:
        RailFeedConfigError: If the publisher is missing required settings.
    """
    if config.publisher == "jsonl":
        return JsonlFilePublisher(config.events_path or config.data_root / DEFAULT_EVENTS_FILE_NAME)
    if config.publisher == "sqs":
        if not config.sqs_queue_url:
            raise RailFeedConfigError(
                "RAILFEED_PUBLISHER=sqs requires RAILFEED_SQS_QUEUE_URL. "
                "Set it to the destination queue URL."
            )
        return SqsPublisher(create_sqs_client(config), config.sqs_queue_url)
    return LoggingPublisher()
