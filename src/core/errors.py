"""RailFeed exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class RailFeedError(Exception):
    """Base exception for all RailFeed failures."""


class RailFeedConfigError(RailFeedError):
    """Raised for invalid runtime configuration."""


class RailFeedRequestError(RailFeedError):
    """Raised for invalid or unsupported invocation requests."""


class RailFeedSourceError(RailFeedError):
    """Raised when a feed source cannot be opened or read."""


class RailFeedDecodeError(RailFeedError):
    """Raised when a schedule payload cannot be decoded."""


class RailFeedTransformError(RailFeedError):
    """Raised when an eligible schedule cannot be turned into an event."""


class RailFeedPublishError(RailFeedError):
    """Raised when an event cannot be delivered to its sink."""


class RailFeedStoreError(RailFeedError):
    """Raised for deduplication and reference-data store failures."""
