"""Sample CIF feed generation.

This module produces synthetic NDJSON feeds for demos and local
runs: one timetable header followed by schedules whose STP
indicators are weighted towards permanent ``N`` records.
"""

from __future__ import annotations

import gzip
import json
import random
from datetime import date, timedelta
from pathlib import Path

from core.constants import (
    FEED_TEXT_ENCODING,
    INTERMEDIATE_LOCATION_TYPE,
    ORIGIN_LOCATION_TYPE,
    SCHEDULE_RECORD_KEY,
    TERMINATING_LOCATION_TYPE,
    TIMETABLE_RECORD_KEY,
)

_OPERATORS = ("VT", "GR", "GW", "XC", "SR", "NT", "TP", "SE", "AW", "CC")
_TIPLOC_CODES = (
    "EUSTON", "KNGX", "STPX", "PADTON", "VICTRIA", "BHAM", "MNCRPIC",
    "LEEDS", "EDINBUR", "GLGC", "BRSTLTM", "CRDFCNT", "YORK", "MKTNKYL",
)
_CATEGORIES = ("OO", "XX", "OW", "XZ", "BR", "EE")
_STP_INDICATORS = ("N", "N", "N", "N", "P", "O", "C")


def generate_sample_lines(
    record_count: int,
    seed: int | None = None,
    today: date | None = None,
) -> list[str]:
    """Generate sample feed lines.

    Args:
        record_count: Number of schedule records after the header.
        seed: Optional seed for reproducible output.
        today: Base date for validity windows, defaults to today.

    Returns:
        NDJSON lines, header first.
    """
    rng = random.Random(seed)
    base_date = today or date.today()
    header = {
        TIMETABLE_RECORD_KEY: {
            "classification": "public",
            "timestamp": int(rng.uniform(1.7e9, 1.8e9)),
            "owner": "Network Rail",
        }
    }
    lines = [json.dumps(header)]
    for _ in range(record_count):
        lines.append(json.dumps({SCHEDULE_RECORD_KEY: _sample_schedule(rng, base_date)}))
    return lines


def write_sample_feed(
    output_path: Path,
    record_count: int,
    seed: int | None = None,
    compress: bool = False,
) -> Path:
    """Write a sample feed file, optionally gzip-compressed.

    Returns:
        Path of the written file.
    """
    content = "\n".join(generate_sample_lines(record_count, seed)) + "\n"
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if compress:
        with gzip.open(output_path, "wt", encoding=FEED_TEXT_ENCODING) as handle:
            handle.write(content)
    else:
        output_path.write_text(content, encoding=FEED_TEXT_ENCODING)
    return output_path


def _sample_schedule(rng: random.Random, base_date: date) -> dict[str, object]:
    tiplocs = rng.sample(_TIPLOC_CODES, rng.randint(3, 7))
    minutes = rng.randint(5 * 60, 21 * 60 + 59)
    locations = []
    for index, tiploc in enumerate(tiplocs):
        is_first = index == 0
        is_last = index == len(tiplocs) - 1
        location_type = (
            ORIGIN_LOCATION_TYPE
            if is_first
            else TERMINATING_LOCATION_TYPE
            if is_last
            else INTERMEDIATE_LOCATION_TYPE
        )
        clock = f"{(minutes // 60) % 24:02d}{minutes % 60:02d}"
        locations.append(
            {
                "tiploc_code": tiploc,
                "location_type": location_type,
                "record_identity": location_type,
                "departure": None if is_last else clock,
                "arrival": None if is_first else clock,
                "public_departure": None if is_last else clock,
                "public_arrival": None if is_first else clock,
                "platform": str(rng.randint(1, 14)),
            }
        )
        minutes += rng.randint(15, 44)
    start_date = base_date + timedelta(days=rng.randint(0, 13))
    return {
        "CIF_train_uid": f"{chr(ord('A') + rng.randint(0, 25))}{rng.randint(10000, 99999)}",
        "CIF_stp_indicator": rng.choice(_STP_INDICATORS),
        "schedule_start_date": start_date.isoformat(),
        "schedule_end_date": (base_date + timedelta(days=90)).isoformat(),
        "schedule_days_runs": "1111100",
        "train_status": "P",
        "train_category": rng.choice(_CATEGORIES),
        "atoc_code": rng.choice(_OPERATORS),
        "applicable_timetable": "Y",
        "schedule_location": locations,
    }
