"""Cooperative cancellation for feed processing.

The processor polls the token between lines, never mid-line.
"""

from __future__ import annotations

import threading
import time


class CancellationToken:
    """Cancellation signal combining an event and an optional deadline."""

    def __init__(
        self,
        event: threading.Event | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._event = event or threading.Event()
        self._deadline = (
            time.monotonic() + timeout_seconds if timeout_seconds is not None else None
        )

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        """Return whether cancellation was requested or the deadline passed."""
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def reason(self) -> str:
        """Describe why processing stopped."""
        return "cancelled" if self._event.is_set() else "timed out"
