"""Deduplication key derivation.

A schedule is identified across runs by its train id and
validity start date.
"""

from __future__ import annotations

from core.types import ScheduleRecord


def build_dedup_key(record: ScheduleRecord) -> str:
    """Build the idempotency key for a schedule.

    Args:
        record: Eligible schedule record.

    Returns:
        Key in ``<train_uid>_<start_date>`` form.
    """
    return f"{record.train_uid}_{record.start_date}"
