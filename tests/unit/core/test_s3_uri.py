"""Unit tests for S3 URI parsing."""

from __future__ import annotations

import pytest

from core.errors import RailFeedSourceError
from core.s3_uri import S3Location, parse_s3_uri


def test_parse_s3_uri_splits_bucket_and_key() -> None:
    """Parser should split bucket and nested key."""
    assert parse_s3_uri("s3://feeds/cif/update.gz") == S3Location("feeds", "cif/update.gz")


def test_parse_s3_uri_raises_without_key() -> None:
    """Parser should reject bucket-only URIs."""
    with pytest.raises(RailFeedSourceError):
        parse_s3_uri("s3://feeds")
