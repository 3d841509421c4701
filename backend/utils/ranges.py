"""
utils/ranges.py

Range header resolution for the media endpoints.

The resolver is deliberately permissive: anything it cannot make sense of
falls back to the default bounds instead of producing an error response, so
players always get something playable back.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

RANGE_UNIT_PREFIX = "bytes="
# Largest value a range bound may take; bigger tokens are treated as absent.
MAX_RANGE_VALUE = 2**63 - 1

_NON_DIGITS = re.compile(r"[^0-9]")


class TransferStatus(str, Enum):
    FULL = "full"
    PARTIAL = "partial"

    @property
    def http_status(self) -> int:
        return 200 if self is TransferStatus.FULL else 206


@dataclass(frozen=True)
class ByteInterval:
    """Inclusive byte window ``[start, end]`` of a file of ``total`` bytes."""

    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        # an empty file resolves to {0, 0} but carries no payload
        if self.total == 0:
            return 0
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"

    @property
    def is_full(self) -> bool:
        return self.total == 0 or (self.start == 0 and self.end == self.total - 1)


def _last_byte(file_size: int) -> int:
    return file_size - 1 if file_size > 0 else 0


def _parse_bound(token: Optional[str]) -> Optional[int]:
    """
    Keep only the digits of a range token and parse them.
    Returns None when nothing usable is left.
    """
    if not token:
        return None
    digits = _NON_DIGITS.sub("", token)
    logger.debug("Parsed numeric value: [%s]", digits)
    if not digits:
        return None
    value = int(digits)
    if value > MAX_RANGE_VALUE:
        logger.warning("Invalid range value: [%s]", token)
        return None
    return value


def status_for(interval: ByteInterval) -> TransferStatus:
    return TransferStatus.FULL if interval.is_full else TransferStatus.PARTIAL


def full_interval(file_size: int) -> ByteInterval:
    return ByteInterval(0, _last_byte(file_size), file_size)


def resolve(range_header: Optional[str], file_size: int) -> Tuple[ByteInterval, TransferStatus]:
    """
    Resolve a ``Range`` header value against a file size.

    Supports a single ``bytes=<start>-<end>`` window where either bound may be
    missing. A missing start means 0 and a missing end means the last byte;
    note that ``bytes=-N`` is read as ``0..N``, not as the last N bytes.
    Out of bounds values are clamped into the file, never rejected.
    """
    if not range_header:
        logger.debug("No range specified, serving entire file.")
        interval = full_interval(file_size)
        return interval, TransferStatus.FULL

    logger.debug("Parsing range header: [%s]", range_header)
    byte_range = range_header.strip()
    if byte_range.startswith(RANGE_UNIT_PREFIX):
        byte_range = byte_range[len(RANGE_UNIT_PREFIX):]
    tokens = byte_range.split("-")

    start = _parse_bound(tokens[0])
    end = _parse_bound(tokens[1]) if len(tokens) > 1 else None

    if start is None:
        start = 0
    if end is None:
        end = _last_byte(file_size)

    if end == 0 and file_size > 0:
        end = file_size - 1
    if file_size > 0 and end >= file_size:
        end = file_size - 1
    if start > end:
        start = end
    if start < 0:
        start = 0
    if file_size == 0:
        start = end = 0

    logger.debug("Parsed range: %d-%d", start, end)
    interval = ByteInterval(start, end, file_size)
    return interval, status_for(interval)
