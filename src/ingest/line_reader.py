"""Compression-transparent line reading over byte streams.

This module peeks the first two bytes of a feed stream to detect gzip,
restores the stream position (or replays the peeked bytes for
non-seekable streams), and yields one decoded text line at a time.
Memory use is bounded by line length, not feed size.
"""

from __future__ import annotations

import gzip
import io
from typing import Any, BinaryIO, Iterator

from core.constants import FEED_TEXT_ENCODING, GZIP_MAGIC


class _ReplayStream(io.RawIOBase):
    """Raw stream that serves already-peeked bytes before the source."""

    def __init__(self, prefix: bytes, source: Any) -> None:
        self._prefix = prefix
        self._source = source

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if self._prefix:
            count = min(len(buffer), len(self._prefix))
            buffer[:count] = self._prefix[:count]
            self._prefix = self._prefix[count:]
            return count
        data = self._source.read(len(buffer))
        if not data:
            return 0
        count = len(data)
        buffer[:count] = data
        return count


def detect_gzip(stream: Any) -> tuple[bool, BinaryIO]:
    """Detect gzip framing without losing any bytes.

    Args:
        stream: Readable binary stream.

    Returns:
        Pair of gzip flag and a stream positioned at the original start.
    """
    if _is_seekable(stream):
        start = stream.tell()
        head = stream.read(len(GZIP_MAGIC))
        stream.seek(start)
        return head == GZIP_MAGIC, stream
    head = _read_prefix(stream, len(GZIP_MAGIC))
    return head == GZIP_MAGIC, io.BufferedReader(_ReplayStream(head, stream))


def iter_feed_lines(stream: Any) -> Iterator[str]:
    """Yield feed lines without terminators, decompressing when needed.

    Invalid UTF-8 bytes are replaced rather than failing the stream.
    The caller's stream is left open.

    Args:
        stream: Readable binary stream, plain or gzip-compressed.

    Yields:
        One text line at a time, in feed order.
    """
    is_gzip, source = detect_gzip(stream)
    binary: Any = gzip.GzipFile(fileobj=source, mode="rb") if is_gzip else source
    text = io.TextIOWrapper(binary, encoding=FEED_TEXT_ENCODING, errors="replace", newline="")
    try:
        for line in text:
            yield line.rstrip("\r\n")
    finally:
        text.detach()
        if is_gzip:
            binary.close()


def _is_seekable(stream: Any) -> bool:
    seekable = getattr(stream, "seekable", None)
    return bool(seekable and seekable())


def _read_prefix(stream: Any, size: int) -> bytes:
    """Read up to ``size`` bytes, tolerating short reads."""
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
