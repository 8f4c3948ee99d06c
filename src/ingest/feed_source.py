"""Feed source opening.

This module opens a feed source as a readable byte stream from a
local path or an ``s3://`` object. Bodies are streamed, never read
into memory whole. HTTP retrieval belongs to the trigger layer.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.config import RailFeedConfig
from core.errors import RailFeedSourceError
from core.s3_uri import parse_s3_uri
from core.types import InvocationRequest
from store.aws_clients import create_s3_client


def resolve_source_uri(request: InvocationRequest, config: RailFeedConfig) -> str:
    """Pick the source for a request: override first, then feed default.

    Args:
        request: Validated invocation request.
        config: Runtime config with per-feed default sources.

    Returns:
        Source path or URI.

    Raises:
        RailFeedSourceError: If no source is configured for the feed type.
    """
    if request.source_override:
        return request.source_override
    default_uri = config.full_feed_uri if request.feed_type == "full" else config.update_feed_uri
    if not default_uri:
        env_name = (
            "RAILFEED_FULL_FEED_URI" if request.feed_type == "full" else "RAILFEED_UPDATE_FEED_URI"
        )
        raise RailFeedSourceError(
            f"No source configured for the {request.feed_type} feed. "
            f"Pass a source explicitly or set {env_name}."
        )
    return default_uri


def open_feed_stream(source_uri: str, config: RailFeedConfig) -> Any:
    """Open a feed source as a binary stream.

    Args:
        source_uri: Local file path or ``s3://bucket/key`` URI.
        config: Runtime config for boto3 session defaults.

    Returns:
        Readable binary stream; the caller closes it.

    Raises:
        RailFeedSourceError: If the source cannot be opened.
    """
    if source_uri.startswith("s3://"):
        return _open_s3_stream(source_uri, config)
    return _open_local_stream(Path(source_uri).expanduser())


def _open_local_stream(source_path: Path) -> Any:
    if not source_path.is_file():
        raise RailFeedSourceError(
            f"Failed to open feed at {source_path}: file does not exist. "
            "Provide an existing feed file."
        )
    try:
        return source_path.open("rb")
    except OSError as error:
        raise RailFeedSourceError(f"Failed to open feed at {source_path}: {error}.") from error


def _open_s3_stream(source_uri: str, config: RailFeedConfig) -> Any:
    location = parse_s3_uri(source_uri)
    try:
        s3_client = create_s3_client(config)
        response = s3_client.get_object(Bucket=location.bucket, Key=location.key)
    except (BotoCoreError, ClientError) as error:
        raise RailFeedSourceError(
            f"Failed to open feed at {source_uri}: {error}. "
            "Check the object key and AWS credentials."
        ) from error
    return io.BufferedReader(_S3BodyStream(response["Body"], source_uri))


class _S3BodyStream(io.RawIOBase):
    """Raw stream over a botocore ``StreamingBody``.

    Read failures such as connection resets or truncated bodies surface
    as ``RailFeedSourceError`` instead of botocore exceptions.
    """

    def __init__(self, body: Any, source_uri: str) -> None:
        self._body = body
        self._source_uri = source_uri

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        try:
            data = self._body.read(len(buffer))
        except BotoCoreError as error:
            raise RailFeedSourceError(
                f"Failed to read feed at {self._source_uri}: {error}."
            ) from error
        count = len(data)
        buffer[:count] = data
        return count

    def close(self) -> None:
        if not self.closed:
            self._body.close()
        super().close()
