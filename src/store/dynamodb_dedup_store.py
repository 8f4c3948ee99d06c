"""DynamoDB-backed deduplication store.

Keys live in a table with a ``DedupKey`` partition key and an
``ExpiresAt`` epoch attribute used as the table's TTL. Expired items
may linger until DynamoDB reaps them, so ``exists`` also checks the
expiry itself.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import RailFeedStoreError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class DynamoDbDedupStore:
    """Dedup store for concurrent invocations sharing one table."""

    def __init__(self, table: Any, retention: timedelta) -> None:
        """Create a store over a boto3 DynamoDB ``Table`` resource.

        Args:
            table: boto3 ``Table`` resource.
            retention: Retention horizon written into ``ExpiresAt``.
        """
        self._table = table
        self._retention = retention

    def exists(self, key: str) -> bool:
        try:
            response = self._table.get_item(Key={"DedupKey": key}, ConsistentRead=True)
        except (BotoCoreError, ClientError) as error:
            raise RailFeedStoreError(
                f"Failed to read dedup key {key} from DynamoDB: {error}. "
                "Check AWS credentials and RAILFEED_DEDUP_TABLE."
            ) from error
        item = response.get("Item")
        if not item:
            return False
        expires_at = int(item.get("ExpiresAt", 0))
        return expires_at > int(datetime.now(timezone.utc).timestamp())

    def record(self, key: str, processed_at: datetime, run_id: str) -> None:
        if processed_at.tzinfo is None:
            processed_at = processed_at.replace(tzinfo=timezone.utc)
        expires_at = int((processed_at + self._retention).timestamp())
        try:
            self._table.put_item(
                Item={
                    "DedupKey": key,
                    "ProcessedAt": processed_at.isoformat(),
                    "RunId": run_id,
                    "ExpiresAt": expires_at,
                }
            )
        except (BotoCoreError, ClientError) as error:
            raise RailFeedStoreError(
                f"Failed to record dedup key {key} in DynamoDB: {error}. "
                "Check AWS credentials and RAILFEED_DEDUP_TABLE."
            ) from error
        _LOGGER.debug("dedup_key_recorded", key=key, run_id=run_id, expires_at=expires_at)
