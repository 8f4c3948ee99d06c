"""boto3 session and client construction.

This module encapsulates session settings shared by the S3 feed
source, the DynamoDB dedup store, and the SQS publisher.
"""

from __future__ import annotations

from typing import Any

import boto3

from core.config import RailFeedConfig


def create_session(config: RailFeedConfig) -> boto3.session.Session:
    """Create a boto3 session from configured profile and region.

    Args:
        config: Runtime config with optional session settings.

    Returns:
        boto3 session.
    """
    session_kwargs: dict[str, str] = {}
    if config.aws_profile:
        session_kwargs["profile_name"] = config.aws_profile
    if config.aws_region:
        session_kwargs["region_name"] = config.aws_region
    return boto3.session.Session(**session_kwargs)


def create_s3_client(config: RailFeedConfig) -> Any:
    """Create a boto3 S3 client."""
    return create_session(config).client("s3")


def create_sqs_client(config: RailFeedConfig) -> Any:
    """Create a boto3 SQS client."""
    return create_session(config).client("sqs")


def create_dynamodb_table(config: RailFeedConfig, table_name: str) -> Any:
    """Create a boto3 DynamoDB ``Table`` resource."""
    return create_session(config).resource("dynamodb").Table(table_name)
