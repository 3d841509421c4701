"""
utils/streamer.py

Streaming helpers that copy a single byte window of a local file.
Memory use is bounded by the chunk size, whatever the window or file size.
"""

import io
import logging
import os
from contextlib import contextmanager, nullcontext
from typing import BinaryIO, Iterator, Union

from .errors import TransferError
from .ranges import ByteInterval

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8 * 1024

Source = Union[str, os.PathLike, BinaryIO]


def _open_source(source: Source):
    # a handle passed in by the caller is left open for the caller to close
    if hasattr(source, "read"):
        return nullcontext(source)
    return open(source, "rb")


@contextmanager
def _reading(source: Source):
    try:
        with _open_source(source) as fh:
            yield fh
    except TransferError:
        raise
    except (OSError, ValueError) as e:
        # ValueError: the caller handed in a closed file
        raise TransferError(f"read failed for {_describe(source)}: {e}") from e


def _describe(source: Source) -> str:
    return str(getattr(source, "name", source))


def iter_range(source: Source, interval: ByteInterval, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """
    Yield the bytes of ``interval`` from ``source`` in chunks of at most
    ``chunk_size`` bytes.

    The file is opened on first iteration and closed when the generator is
    exhausted, fails, or is closed early (client went away). A file that
    turns out shorter than the interval raises TransferError rather than
    ending the stream short.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    remaining = interval.length
    if remaining == 0:
        return

    with _reading(source) as fh:
        fh.seek(interval.start)
        while remaining > 0:
            chunk = fh.read(min(chunk_size, remaining))
            if not chunk:
                raise TransferError(
                    f"{_describe(source)} ended {remaining} bytes early "
                    f"while serving {interval.content_range}"
                )
            remaining -= len(chunk)
            yield chunk


def _write_all(sink, chunk: bytes, written: int) -> int:
    """
    Hand ``chunk`` to ``sink`` until all of it is accepted and return how
    many bytes that was. Raw sinks may take less than they are given.
    """
    view = memoryview(chunk)
    # a raw sink returning None would have blocked, anything else returning
    # None (BytesIO-like or plain callables) took the whole buffer
    raw = isinstance(sink, io.RawIOBase)
    sent = 0
    while sent < len(view):
        try:
            accepted = sink.write(view[sent:])
        except (OSError, ValueError) as e:
            raise TransferError(f"write failed after {written + sent} bytes: {e}") from e
        if accepted is None and not raw:
            accepted = len(view) - sent
        if not accepted:
            raise TransferError(f"sink stopped accepting data after {written + sent} bytes")
        sent += accepted
    return sent


def transfer(source: Source, interval: ByteInterval, sink, buffer_size: int = CHUNK_SIZE) -> int:
    """
    Copy ``interval`` from ``source`` into ``sink`` (anything with ``write``).

    Each chunk is written as soon as it is read and the sink is flushed once
    at the end. Short writes are continued until the sink took the whole
    chunk. Returns the number of bytes the sink accepted. Read, write and
    flush failures abort the copy with TransferError; nothing is retried.
    """
    written = 0
    chunks = iter_range(source, interval, buffer_size)
    try:
        for chunk in chunks:
            written += _write_all(sink, chunk, written)
        flush = getattr(sink, "flush", None)
        if flush is not None:
            try:
                flush()
            except (OSError, ValueError) as e:
                raise TransferError(f"flush failed after {written} bytes: {e}") from e
    except TransferError:
        logger.exception("Error streaming file: %s", _describe(source))
        raise
    finally:
        chunks.close()
    return written
