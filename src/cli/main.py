"""RailFeed CLI entry points.
This module exposes feed processing, single-schedule transform, and
sample-feed commands. It maps argparse commands onto pipeline calls.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import RailFeedConfig
from core.constants import DEFAULT_SAMPLE_RECORD_COUNT, SUPPORTED_FEED_TYPES
from core.errors import RailFeedError
from core.invocation_request import read_request_payload
from core.logging_config import configure_logging
from ingest.cancellation import CancellationToken
from ingest.pipeline import FeedIngestRunner
from ingest.record_decoder import decode_schedule
from ingest.sample_feed import write_sample_feed
from store.dedup_store import JsonFileDedupStore
from store.event_payload import event_to_payload, result_to_payload
from store.station_reference import load_station_table
from transforms.event_transformer import transform_schedule


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="railfeed", description="Rail schedule feed ingestion")
    parser.add_argument("--data-root", help="Override RAILFEED_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_process_command(subparsers)
    _add_transform_command(subparsers)
    _add_sample_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the RailFeed CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args.data_root)
        configure_logging(config.log_level)
        if args.command == "process":
            return _run_process_command(config, args)
        if args.command == "transform":
            return _run_transform_command(config, args)
        if args.command == "sample":
            return _run_sample_command(args)
    except RailFeedError as error:
        parser.exit(1, f"railfeed: error: {error}\n")
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(data_root: str | None) -> RailFeedConfig:
    """Build config with optional data-root override."""
    config = RailFeedConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return config


def _run_process_command(config: RailFeedConfig, args: argparse.Namespace) -> int:
    """Handle process command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code: 0 for completed or partial runs, 1 for failed runs.
    """
    payload = _build_request_payload(args)
    if args.reset_dedup:
        if config.dedup_backend != "file":
            raise RailFeedError(
                "--reset-dedup only supports the file dedup backend. "
                "Reset other backends before invoking the pipeline."
            )
        JsonFileDedupStore(config.data_root).clear()
    runner = FeedIngestRunner.from_config(config)
    cancellation = CancellationToken(timeout_seconds=args.timeout) if args.timeout else None
    result = runner.handle(payload, cancellation=cancellation)
    print(json.dumps(result_to_payload(result), indent=2, sort_keys=True))
    return 1 if result.status == "failed" else 0


def _build_request_payload(args: argparse.Namespace) -> object:
    """Merge a request file with command-line overrides.

    Validation is left to the runner so invalid requests yield a
    ``failed`` result document.
    """
    payload = read_request_payload(args.request_file) if args.request_file else {}
    if not isinstance(payload, dict):
        return payload
    merged: dict[str, Any] = dict(payload)
    if args.feed_type:
        merged["feedType"] = args.feed_type
    if args.force_refresh:
        merged["forceRefresh"] = True
    if args.source:
        merged["sourceOverride"] = args.source
    if args.date_start or args.date_end:
        date_range = merged.get("dateRange")
        date_range = dict(date_range) if isinstance(date_range, dict) else {}
        if args.date_start:
            date_range["start"] = args.date_start
        if args.date_end:
            date_range["end"] = args.date_end
        merged["dateRange"] = date_range
    return merged


def _run_transform_command(config: RailFeedConfig, args: argparse.Namespace) -> int:
    """Handle transform command for one ``JsonScheduleV1`` document."""
    schedule_path = Path(args.schedule_file).expanduser()
    try:
        payload = json.loads(schedule_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise RailFeedError(f"Failed to read schedule file at {schedule_path}: {error}.") from error
    if isinstance(payload, dict) and "JsonScheduleV1" in payload:
        payload = payload["JsonScheduleV1"]
    record = decode_schedule(payload)
    stations = load_station_table(config.stations_path)
    event = transform_schedule(record, stations, args.correlation_id)
    print(json.dumps(event_to_payload(event), indent=2, sort_keys=True))
    return 0


def _run_sample_command(args: argparse.Namespace) -> int:
    """Handle sample command."""
    output_path = write_sample_feed(
        Path(args.output).expanduser(),
        record_count=args.records,
        seed=args.seed,
        compress=args.gzip,
    )
    print(output_path)
    return 0


def _add_process_command(subparsers: Any) -> None:
    """Register process subcommand."""
    parser = subparsers.add_parser("process", help="Process a schedule feed file or s3:// object")
    parser.add_argument("source", nargs="?", help="Feed file or s3://bucket/key override")
    parser.add_argument("--feed-type", choices=SUPPORTED_FEED_TYPES, help="Feed variant")
    parser.add_argument(
        "--force-refresh",
        action="store_true",
        help="Publish without dedup checks; keys are still recorded",
    )
    parser.add_argument(
        "--reset-dedup",
        action="store_true",
        help="Clear the file dedup store before running, e.g. for a full feed",
    )
    parser.add_argument("--request-file", help="YAML or JSON invocation request")
    parser.add_argument("--date-start", help="Earliest schedule start date, YYYY-MM-DD")
    parser.add_argument("--date-end", help="Latest schedule start date, YYYY-MM-DD")
    parser.add_argument("--timeout", type=float, help="Stop between lines after N seconds")


def _add_transform_command(subparsers: Any) -> None:
    """Register transform subcommand."""
    parser = subparsers.add_parser("transform", help="Transform one schedule JSON into an event")
    parser.add_argument("schedule_file", help="JSON file with a JsonScheduleV1 object")
    parser.add_argument("--correlation-id", default="cli-transform", help="Event correlation id")


def _add_sample_command(subparsers: Any) -> None:
    """Register sample subcommand."""
    parser = subparsers.add_parser("sample", help="Write a synthetic sample feed")
    parser.add_argument("output", help="Output feed path")
    parser.add_argument(
        "--records",
        type=int,
        default=DEFAULT_SAMPLE_RECORD_COUNT,
        help="Schedule records to generate",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--gzip", action="store_true", help="Gzip-compress the output")
