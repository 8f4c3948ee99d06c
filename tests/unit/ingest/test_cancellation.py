"""Unit tests for cancellation tokens."""

from __future__ import annotations

from ingest.cancellation import CancellationToken


def test_cancel_sets_reason() -> None:
    """Explicit cancellation should be reported as cancelled."""
    token = CancellationToken()
    token.cancel()

    assert token.is_cancelled and token.reason == "cancelled"


def test_expired_deadline_reports_timeout() -> None:
    """A passed deadline should be reported as timed out."""
    token = CancellationToken(timeout_seconds=0)

    assert token.is_cancelled and token.reason == "timed out"


def test_fresh_token_is_not_cancelled() -> None:
    """Tokens without a signal or deadline stay active."""
    assert not CancellationToken().is_cancelled
