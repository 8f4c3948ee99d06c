"""Feed stream orchestration.

This module wires a byte stream through compression detection, line
reading, decoding, filtering, deduplication, transformation, and
publishing. Per-line problems are counted and never abort a run;
only stream-level failures end an invocation early.
"""

from __future__ import annotations

import io
import time
import zlib
from datetime import datetime, timezone
from typing import Any

from botocore.exceptions import BotoCoreError

from core.constants import FEED_TEXT_ENCODING, MAX_RESULT_ERRORS
from core.errors import (
    RailFeedPublishError,
    RailFeedSourceError,
    RailFeedStoreError,
    RailFeedTransformError,
)
from core.logging_config import get_logger
from core.types import (
    DateRange,
    DecodeFailure,
    ProcessingStatistics,
    ProcessResult,
    ProcessStatus,
    ScheduleRecord,
)
from ingest.cancellation import CancellationToken
from ingest.line_reader import iter_feed_lines
from ingest.record_decoder import decode_line
from store.dedup_store import DedupStore
from store.publishers import EventPublisher
from store.station_reference import StationReferenceTable
from transforms.dedup_keys import build_dedup_key
from transforms.event_transformer import transform_schedule
from transforms.schedule_filter import evaluate_schedule

_LOGGER = get_logger(__name__)

_STREAM_ERRORS = (OSError, EOFError, zlib.error, BotoCoreError, RailFeedSourceError)


class _ErrorSample:
    """Bounded list of error messages; the count is kept separately."""

    def __init__(self, limit: int) -> None:
        self._limit = limit
        self.messages: list[str] = []

    def add(self, message: str) -> None:
        if len(self.messages) < self._limit:
            self.messages.append(message)


class _Invocation:
    """State owned by one ``process_stream`` call."""

    def __init__(
        self,
        run_id: str,
        force_refresh: bool,
        date_range: DateRange | None,
        max_errors: int,
    ) -> None:
        self.run_id = run_id
        self.force_refresh = force_refresh
        self.date_range = date_range
        self.statistics = ProcessingStatistics()
        self.errors = _ErrorSample(max_errors)
        self.started = time.monotonic()


class FeedStreamProcessor:
    """Single-threaded, line-at-a-time feed processor."""

    def __init__(
        self,
        stations: StationReferenceTable,
        dedup_store: DedupStore,
        publisher: EventPublisher,
        max_errors: int = MAX_RESULT_ERRORS,
    ) -> None:
        self._stations = stations
        self._dedup_store = dedup_store
        self._publisher = publisher
        self._max_errors = max_errors

    def process_stream(
        self,
        stream: Any,
        run_id: str,
        force_refresh: bool = False,
        cancellation: CancellationToken | None = None,
        date_range: DateRange | None = None,
    ) -> ProcessResult:
        """Process a plain or gzip-compressed NDJSON feed stream.

        Args:
            stream: Readable binary stream; compression is detected.
            run_id: Invocation id, used as event correlation id.
            force_refresh: Skip dedup checks but still record keys.
            cancellation: Optional token polled between lines.
            date_range: Optional schedule start-date window.

        Returns:
            Result with status, frozen statistics, and sampled errors.
        """
        invocation = _Invocation(run_id, force_refresh, date_range, self._max_errors)
        _LOGGER.info("feed_processing_started", run_id=run_id, force_refresh=force_refresh)
        status: ProcessStatus = "completed"
        try:
            for line_number, line in enumerate(iter_feed_lines(stream), 1):
                if cancellation is not None and cancellation.is_cancelled:
                    status = "partial"
                    invocation.errors.add(
                        f"Processing {cancellation.reason} after {line_number - 1} lines"
                    )
                    break
                self._process_line(invocation, line, line_number)
        except _STREAM_ERRORS as error:
            status = "failed"
            invocation.errors.add(f"Stream processing error: {error}")
            _LOGGER.error("feed_stream_failed", run_id=run_id, error=str(error))
        except RailFeedStoreError as error:
            status = "failed"
            invocation.errors.add(f"Dedup store error: {error}")
            _LOGGER.error("dedup_store_failed", run_id=run_id, error=str(error))
        return _finalize(invocation, status)

    def process_content(
        self,
        content: str,
        run_id: str,
        force_refresh: bool = False,
        cancellation: CancellationToken | None = None,
        date_range: DateRange | None = None,
    ) -> ProcessResult:
        """Process already-decoded NDJSON feed text."""
        return self.process_stream(
            io.BytesIO(content.encode(FEED_TEXT_ENCODING)),
            run_id,
            force_refresh=force_refresh,
            cancellation=cancellation,
            date_range=date_range,
        )

    def _process_line(self, invocation: _Invocation, line: str, line_number: int) -> None:
        if not line.strip():
            return
        statistics = invocation.statistics
        statistics.total_lines += 1
        record = decode_line(line, line_number)
        if isinstance(record, DecodeFailure):
            statistics.parse_errors += 1
            invocation.errors.add(f"Line {record.line_number}: {record.message}")
            _LOGGER.debug("feed_line_parse_failed", line_number=line_number, error=record.message)
            return
        if isinstance(record, ScheduleRecord):
            self._process_schedule(invocation, record)

    def _process_schedule(self, invocation: _Invocation, record: ScheduleRecord) -> None:
        statistics = invocation.statistics
        decision = evaluate_schedule(record, self._stations, invocation.date_range)
        if not decision.eligible:
            statistics.schedules_filtered += 1
            return
        statistics.schedules_processed += 1
        dedup_key = build_dedup_key(record)
        if not invocation.force_refresh and self._dedup_store.exists(dedup_key):
            statistics.duplicates_skipped += 1
            return
        try:
            event = transform_schedule(record, self._stations, invocation.run_id)
        except RailFeedTransformError as error:
            statistics.schedules_filtered += 1
            _LOGGER.warning(
                "schedule_transform_failed",
                train_uid=record.train_uid,
                start_date=record.start_date,
                error=str(error),
            )
            return
        try:
            self._publisher.publish(event)
        except RailFeedPublishError as error:
            statistics.publish_failures += 1
            invocation.errors.add(f"Publish failed for {dedup_key}: {error}")
            _LOGGER.error("event_publish_failed", dedup_key=dedup_key, error=str(error))
            return
        statistics.events_published += 1
        self._dedup_store.record(dedup_key, datetime.now(timezone.utc), invocation.run_id)


def _finalize(invocation: _Invocation, status: ProcessStatus) -> ProcessResult:
    """Stop the timer, freeze statistics, and log completion."""
    statistics = invocation.statistics
    statistics.processing_time_ms = int((time.monotonic() - invocation.started) * 1000)
    snapshot = statistics.freeze()
    _LOGGER.info(
        "feed_processing_completed",
        run_id=invocation.run_id,
        status=status,
        total_lines=snapshot.total_lines,
        schedules_processed=snapshot.schedules_processed,
        schedules_filtered=snapshot.schedules_filtered,
        events_published=snapshot.events_published,
        duplicates_skipped=snapshot.duplicates_skipped,
        parse_errors=snapshot.parse_errors,
        publish_failures=snapshot.publish_failures,
        processing_time_ms=snapshot.processing_time_ms,
    )
    return ProcessResult(
        process_id=invocation.run_id,
        status=status,
        statistics=snapshot,
        errors=tuple(invocation.errors.messages),
    )
