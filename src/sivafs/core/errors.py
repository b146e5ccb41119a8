"""
Error types for SivaFS.
Every error derives from SivaFSError and from the closest built-in exception,
so callers can catch either the library type or the standard Python one.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import errno
import io
from typing import Optional


class SivaFSError(Exception):
    """Base class for all SivaFS errors."""


class _PathError(SivaFSError, OSError):
    _errno = None
    _message = ""

    def __init__(self, path: Optional[str] = None, message: Optional[str] = None):
        self.path = path
        super().__init__(self._errno, message or self._message, path)


class NotFoundError(_PathError, FileNotFoundError):
    """No entry and no synthetic directory exists at the path."""
    _errno = errno.ENOENT
    _message = "file does not exist"


class NotADirectory(_PathError, NotADirectoryError):
    """A directory operation was attempted on a path that is a file entry."""
    _errno = errno.ENOTDIR
    _message = "not a directory"


class IsADirectory(_PathError, IsADirectoryError):
    """A file operation was attempted on a path that only resolves to a directory."""
    _errno = errno.EISDIR
    _message = "is a directory"


class NotEmpty(_PathError):
    """Removal of a synthetic directory that still has entries beneath it."""
    _errno = errno.ENOTEMPTY
    _message = "directory not empty"


class WriterBusy(_PathError):
    """A second entry was opened for writing while another write is in progress."""
    _errno = errno.EBUSY
    _message = "write already in progress"


class IndexUnavailable(_PathError):
    """The archive index could not be read (corrupt or truncated archive)."""
    _errno = errno.EIO
    _message = "archive index unavailable"


class UnsupportedOperation(SivaFSError, io.UnsupportedOperation):
    """The operation or flag combination is not supported by an append-only archive."""

    def __init__(self, message: str = "operation not supported", path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class WrongDirection(UnsupportedOperation):
    """Read on a write handle, or write on a read handle."""


class NonSeekable(UnsupportedOperation):
    """Seek on a write handle."""


class AlreadyClosed(SivaFSError, ValueError):
    """I/O on a handle that was already closed."""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        super().__init__("I/O operation on closed file")
