"""Exceptions raised while serving media files."""


class MediaError(Exception):
    """Base class for media serving errors."""


class MediaNotFoundError(MediaError, FileNotFoundError):
    """The path does not denote an existing regular file."""


class InvalidMediaPathError(MediaError, ValueError):
    """The media path is empty or points outside the media directory."""


class TransferError(MediaError, IOError):
    """Reading the file or writing to the client failed mid-stream."""
