"""
utils/media.py

Glue between range resolution and streaming: looks the file up, works out
the content type and builds the response headers for a byte window.
"""

import logging
import mimetypes
import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from .errors import InvalidMediaPathError, MediaNotFoundError
from .ranges import ByteInterval, TransferStatus, full_interval, resolve, status_for
from .streamer import CHUNK_SIZE, iter_range, transfer

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def stat_media(path: str) -> int:
    """Return the size of ``path`` in bytes, or raise MediaNotFoundError."""
    if not os.path.isfile(path):
        raise MediaNotFoundError(f"The media file does not exist: {path}")
    return os.path.getsize(path)


def guess_mime_type(path: str) -> str:
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or DEFAULT_MIME_TYPE


def build_headers(interval: ByteInterval, mime_type: str) -> Dict[str, str]:
    return {
        "Content-Type": mime_type,
        "Accept-Ranges": "bytes",
        "Content-Length": str(interval.length),
        "Content-Range": interval.content_range,
    }


@dataclass
class MediaResponse:
    """Everything needed to answer one media request."""

    path: str
    interval: ByteInterval
    status: TransferStatus
    mime_type: str
    headers: Dict[str, str] = field(init=False)

    def __post_init__(self):
        self.headers = build_headers(self.interval, self.mime_type)

    @property
    def status_code(self) -> int:
        return self.status.http_status

    def body(self, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        return iter_range(self.path, self.interval, chunk_size)

    def write_to(self, sink, buffer_size: int = CHUNK_SIZE) -> int:
        return transfer(self.path, self.interval, sink, buffer_size)


def _respond(path: str, interval: ByteInterval, status: Optional[TransferStatus] = None) -> MediaResponse:
    return MediaResponse(
        path=path,
        interval=interval,
        status=status or status_for(interval),
        mime_type=guess_mime_type(path),
    )


def load_entire_media_file(path: str) -> MediaResponse:
    file_size = stat_media(path)
    return _respond(path, full_interval(file_size), TransferStatus.FULL)


def load_partial_media_file(path: str, range_header: Optional[str]) -> MediaResponse:
    """
    Prepare a response for ``path`` honoring a raw ``Range`` header value.
    An empty or missing header serves the whole file.
    """
    if not range_header:
        return load_entire_media_file(path)
    if not path:
        raise InvalidMediaPathError("The full path to the media file is empty.")

    file_size = stat_media(path)
    interval, status = resolve(range_header, file_size)
    return _respond(path, interval, status)


def load_media_range(path: str, start: int, end: int) -> MediaResponse:
    """Prepare a response for an explicit ``[start, end]`` window, clamped into the file."""
    file_size = stat_media(path)
    if start < 0:
        start = 0
    if end < 0:
        end = 0
    if file_size > 0:
        if start >= file_size:
            start = file_size - 1
        if end >= file_size:
            end = file_size - 1
    else:
        start = end = 0
    if start > end:
        start = end
    return _respond(path, ByteInterval(start, end, file_size))
