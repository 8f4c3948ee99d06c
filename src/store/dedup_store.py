"""Deduplication stores shared across runs.

This module defines the key-presence interface consumed by the
stream processor, with in-memory and file-backed implementations.
Retention is a store policy; the processor only calls ``exists``
and ``record``.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Protocol

from core.constants import DEDUP_FILE_NAME
from core.errors import RailFeedStoreError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class DedupStore(Protocol):
    """Key-presence and insert boundary."""

    def exists(self, key: str) -> bool:
        """Return whether a key was recorded within the retention window."""
        ...

    def record(self, key: str, processed_at: datetime, run_id: str) -> None:
        """Record a key as processed by a run."""
        ...


class InMemoryDedupStore:
    """Process-local dedup store, used by tests and one-off runs."""

    def __init__(self, retention: timedelta | None = None) -> None:
        self._retention = retention
        self._entries: dict[str, tuple[datetime, str]] = {}
        self._lock = threading.Lock()

    def exists(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if not _within_retention(entry[0], self._retention):
                del self._entries[key]
                return False
            return True

    def record(self, key: str, processed_at: datetime, run_id: str) -> None:
        with self._lock:
            self._entries[key] = (processed_at, run_id)

    def run_id_for(self, key: str) -> str | None:
        """Return the run id that last recorded a key."""
        with self._lock:
            entry = self._entries.get(key)
        return entry[1] if entry else None

    def prune(self) -> int:
        """Drop keys outside the retention window.

        Returns:
            Number of keys removed.
        """
        with self._lock:
            live = _live_entries(self._entries, self._retention)
            removed = len(self._entries) - len(live)
            self._entries = live
        return removed

    def clear(self) -> None:
        """Forget all keys."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class JsonFileDedupStore:
    """Append-only JSONL dedup store under the data root.

    Entries are loaded once at construction. Expired keys are dropped
    and the file is compacted to one line per live key when it holds
    stale or repeated lines. Each ``record`` appends one line, so state
    survives process restarts.
    """

    def __init__(self, data_root: Path, retention: timedelta | None = None) -> None:
        self._retention = retention
        self._lock = threading.Lock()
        data_root.mkdir(parents=True, exist_ok=True)
        self._path = data_root / DEDUP_FILE_NAME
        entries, line_count = _read_entries(self._path)
        self._entries = _live_entries(entries, retention)
        if line_count > len(self._entries):
            _rewrite_entries(self._path, self._entries)
            _LOGGER.info(
                "dedup_store_compacted",
                path=str(self._path),
                lines_before=line_count,
                live_keys=len(self._entries),
            )

    @property
    def path(self) -> Path:
        """Location of the backing JSONL file."""
        return self._path

    def exists(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
        return entry is not None and _within_retention(entry[0], self._retention)

    def record(self, key: str, processed_at: datetime, run_id: str) -> None:
        line = _entry_line(key, processed_at, run_id)
        with self._lock:
            try:
                with self._path.open("a", encoding="utf-8") as handle:
                    handle.write(line + "\n")
            except OSError as error:
                raise RailFeedStoreError(
                    f"Failed to record dedup key {key} at {self._path}: {error}. "
                    "Check disk space and permissions for RAILFEED_DATA_ROOT."
                ) from error
            self._entries[key] = (processed_at, run_id)

    def clear(self) -> None:
        """Remove all recorded keys, e.g. before a full refresh run."""
        with self._lock:
            if self._path.exists():
                self._path.unlink()
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _read_entries(path: Path) -> tuple[dict[str, tuple[datetime, str]], int]:
    """Load recorded keys with their latest processing time and run id.

    Returns:
        Entries by key, and the number of non-blank lines read.
    """
    if not path.exists():
        return {}, 0
    entries: dict[str, tuple[datetime, str]] = {}
    line_count = 0
    with path.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, 1):
            if not line.strip():
                continue
            line_count += 1
            try:
                payload = json.loads(line)
                entries[str(payload["key"])] = (
                    datetime.fromisoformat(payload["processed_at"]),
                    str(payload.get("run_id", "")),
                )
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as error:
                raise RailFeedStoreError(
                    f"Failed to parse dedup store at {path}:{line_number}: {error}. "
                    "Delete or repair the file and retry."
                ) from error
    return entries, line_count


def _rewrite_entries(path: Path, entries: dict[str, tuple[datetime, str]]) -> None:
    """Replace the store file with one line per entry."""
    temp_path = path.with_name(path.name + ".tmp")
    try:
        with temp_path.open("w", encoding="utf-8") as handle:
            for key, (processed_at, run_id) in entries.items():
                handle.write(_entry_line(key, processed_at, run_id) + "\n")
        temp_path.replace(path)
    except OSError as error:
        raise RailFeedStoreError(
            f"Failed to compact dedup store at {path}: {error}. "
            "Check disk space and permissions for RAILFEED_DATA_ROOT."
        ) from error


def _entry_line(key: str, processed_at: datetime, run_id: str) -> str:
    return json.dumps(
        {"key": key, "processed_at": processed_at.isoformat(), "run_id": run_id},
        sort_keys=True,
    )


def _live_entries(
    entries: dict[str, tuple[datetime, str]],
    retention: timedelta | None,
) -> dict[str, tuple[datetime, str]]:
    return {
        key: entry for key, entry in entries.items() if _within_retention(entry[0], retention)
    }


def _within_retention(processed_at: datetime, retention: timedelta | None) -> bool:
    if retention is None:
        return True
    if processed_at.tzinfo is None:
        processed_at = processed_at.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc) - processed_at <= retention
