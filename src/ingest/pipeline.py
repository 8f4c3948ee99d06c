"""Feed ingest orchestration for trigger-layer invocations.

This module resolves an invocation request to a source, opens it as
a byte stream, and hands it to the stream processor. Request and
source problems become ``failed`` results instead of exceptions.
"""

from __future__ import annotations

import uuid

from core.config import RailFeedConfig
from core.errors import RailFeedRequestError, RailFeedSourceError
from core.invocation_request import parse_invocation_request
from core.logging_config import get_logger
from core.types import InvocationRequest, ProcessResult
from ingest.cancellation import CancellationToken
from ingest.feed_source import open_feed_stream, resolve_source_uri
from ingest.stream_processor import FeedStreamProcessor
from store.backends import build_dedup_store, build_publisher
from store.dedup_store import DedupStore
from store.publishers import EventPublisher
from store.station_reference import StationReferenceTable, load_station_table

_LOGGER = get_logger(__name__)


class FeedIngestRunner:
    """Runs invocations against one set of collaborators."""

    def __init__(
        self,
        config: RailFeedConfig,
        stations: StationReferenceTable,
        dedup_store: DedupStore,
        publisher: EventPublisher,
    ) -> None:
        self._config = config
        self._processor = FeedStreamProcessor(stations, dedup_store, publisher)

    @classmethod
    def from_config(cls, config: RailFeedConfig) -> "FeedIngestRunner":
        """Build a runner with the configured stations, store, and publisher."""
        return cls(
            config,
            load_station_table(config.stations_path),
            build_dedup_store(config),
            build_publisher(config),
        )

    def run(
        self,
        request: InvocationRequest,
        run_id: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ProcessResult:
        """Execute one invocation request.

        Args:
            request: Validated invocation request.
            run_id: Optional run id; a UUID is generated when omitted.
            cancellation: Optional token polled between lines.

        Returns:
            Processing result; ``failed`` with no statistics when the
            source cannot be opened.
        """
        run_id = run_id or str(uuid.uuid4())
        try:
            source_uri = resolve_source_uri(request, self._config)
            stream = open_feed_stream(source_uri, self._config)
        except RailFeedSourceError as error:
            _LOGGER.error("feed_source_unavailable", run_id=run_id, error=str(error))
            return ProcessResult(
                process_id=run_id, status="failed", statistics=None, errors=(str(error),)
            )
        _LOGGER.info(
            "feed_ingest_started",
            run_id=run_id,
            feed_type=request.feed_type,
            source_uri=source_uri,
            force_refresh=request.force_refresh,
        )
        try:
            return self._processor.process_stream(
                stream,
                run_id,
                force_refresh=request.force_refresh,
                cancellation=cancellation,
                date_range=request.date_range,
            )
        finally:
            stream.close()

    def handle(
        self,
        payload: object,
        run_id: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ProcessResult:
        """Validate a raw request payload, then run it.

        Invalid requests, e.g. an unsupported ``feedType``, produce a
        ``failed`` result with no statistics.
        """
        run_id = run_id or str(uuid.uuid4())
        try:
            request = parse_invocation_request(payload)
        except RailFeedRequestError as error:
            _LOGGER.warning("invocation_request_rejected", run_id=run_id, error=str(error))
            return ProcessResult(
                process_id=run_id, status="failed", statistics=None, errors=(str(error),)
            )
        return self.run(request, run_id=run_id, cancellation=cancellation)


def ingest_feed(request: InvocationRequest, config: RailFeedConfig) -> ProcessResult:
    """Run one invocation with collaborators built from configuration.

    Args:
        request: Validated invocation request.
        config: Runtime configuration.

    Returns:
        Processing result.
    """
    return FeedIngestRunner.from_config(config).run(request)
