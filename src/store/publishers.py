"""Event publisher boundary and sink implementations.

The stream processor depends only on ``EventPublisher``. Every
implementation reports failure synchronously by raising
``RailFeedPublishError`` so the caller can count it.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import RailFeedPublishError
from core.logging_config import get_logger
from core.types import PathwayConfirmedEvent
from store.event_payload import event_to_json

_LOGGER = get_logger(__name__)


class EventPublisher(Protocol):
    """Downstream sink for pathway-confirmed events."""

    def publish(self, event: PathwayConfirmedEvent) -> None:
        """Deliver one event.

        Raises:
            RailFeedPublishError: If the event was not delivered.
        """
        ...


class LoggingPublisher:
    """Log sink that records each event as a structured log line."""

    def publish(self, event: PathwayConfirmedEvent) -> None:
        _LOGGER.info(
            "event_published",
            train_service_number=event.train_service_number,
            travel_date=event.travel_date,
            origin=event.origin,
            destination=event.destination,
            passage_point_count=len(event.passage_points),
            correlation_id=event.metadata.correlation_id,
        )


class InMemoryPublisher:
    """Test sink collecting events in publish order."""

    def __init__(self) -> None:
        self.events: list[PathwayConfirmedEvent] = []

    def publish(self, event: PathwayConfirmedEvent) -> None:
        self.events.append(event)


class JsonlFilePublisher:
    """Append each event as one JSON line to a local file."""

    def __init__(self, events_path: Path) -> None:
        self._events_path = events_path
        self._lock = threading.Lock()
        events_path.parent.mkdir(parents=True, exist_ok=True)

    def publish(self, event: PathwayConfirmedEvent) -> None:
        line = event_to_json(event)
        with self._lock:
            try:
                with self._events_path.open("a", encoding="utf-8") as handle:
                    handle.write(line + "\n")
            except OSError as error:
                raise RailFeedPublishError(
                    f"Failed to write event for {event.train_service_number} "
                    f"to {self._events_path}: {error}."
                ) from error


class SqsPublisher:
    """Publish events as SQS messages through a boto3 client."""

    def __init__(self, sqs_client: Any, queue_url: str) -> None:
        self._sqs_client = sqs_client
        self._queue_url = queue_url
        self._is_fifo = queue_url.endswith(".fifo")

    def publish(self, event: PathwayConfirmedEvent) -> None:
        request: dict[str, Any] = {
            "QueueUrl": self._queue_url,
            "MessageBody": event_to_json(event),
            "MessageAttributes": {
                "eventName": {"DataType": "String", "StringValue": event.metadata.name},
                "correlationId": {
                    "DataType": "String",
                    "StringValue": event.metadata.correlation_id,
                },
            },
        }
        if self._is_fifo:
            # FIFO queues keep one train's events ordered and collapse retries.
            request["MessageGroupId"] = event.train_service_number
            request["MessageDeduplicationId"] = (
                f"{event.train_service_number}_{event.travel_date}_{event.metadata.correlation_id}"
            )
        try:
            self._sqs_client.send_message(**request)
        except (BotoCoreError, ClientError) as error:
            raise RailFeedPublishError(
                f"Failed to publish event for {event.train_service_number} to SQS: {error}."
            ) from error
