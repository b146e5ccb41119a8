"""
File handles returned by SivaFS.

A handle only ever goes one way: ReadFile reads an existing entry, WriteFile
streams the payload of a freshly appended entry. Closing a WriteFile flushes
the archive and frees the session's writer slot.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import io

from sivafs.core.errors import AlreadyClosed, NonSeekable, WrongDirection
from sivafs.core.global_config import GlobalConfig
from sivafs.core.logging import debug_print


class _File:
    def __init__(self, name: str, session):
        self.name = name
        self._session = session
        self._closed = False

    @property
    def closed(self):
        return self._closed

    def _check_open(self):
        if self._closed:
            raise AlreadyClosed(self.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        state = 'closed' if self._closed else 'open'
        return f"<{type(self).__name__} name={self.name!r} {state}>"


class ReadFile(_File):
    """
    Read only, seekable handle over the stored bytes of one entry.
    """

    def __init__(self, name: str, session, section):
        super().__init__(name, session)
        self._section = section
        self._generation = session.generation
        self._position = 0

    @property
    def size(self) -> int:
        return self._section.size

    def readable(self):
        return True

    def writable(self):
        return False

    def seekable(self):
        return True

    def read(self, size=-1) -> bytes:
        """Read up to `size` bytes from the current position; everything left if size < 0."""
        self._check_open()
        remaining = max(self._section.size - self._position, 0)
        if size is None or size < 0 or size > remaining:
            size = remaining
        chunk_size = GlobalConfig.get_read_chunk_size()
        chunks = []
        while size > 0:
            data = self._read_at(self._position, min(size, chunk_size))
            if not data:
                break
            chunks.append(data)
            self._position += len(data)
            size -= len(data)
        return b''.join(chunks)

    def read_at(self, offset: int, size: int) -> bytes:
        """Read up to `size` bytes at `offset` without moving the position."""
        self._check_open()
        return self._read_at(offset, size)

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        buffer[:len(data)] = data
        return len(data)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._check_open()
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._position + offset
        elif whence == io.SEEK_END:
            position = self._section.size + offset
        else:
            raise ValueError(f"invalid whence ({whence})")
        if position < 0:
            raise ValueError(f"negative seek position {position}")
        self._position = position
        return position

    def tell(self) -> int:
        self._check_open()
        return self._position

    def write(self, data):
        self._check_open()
        raise WrongDirection("file is read-only", path=self.name)

    def close(self):
        self._closed = True

    def _read_at(self, offset, size):
        return self._session.read_at(self._generation, self.name, self._section, offset, size)


class WriteFile(_File):
    """
    Write only, sequential handle over a new entry. The entry header is already
    in the archive; bytes written here become its payload.
    """

    def __init__(self, name: str, session, generation: int):
        super().__init__(name, session)
        self._generation = generation
        self._written = 0

    def readable(self):
        return False

    def writable(self):
        return True

    def seekable(self):
        return False

    def write(self, data) -> int:
        self._check_open()
        written = self._session.write(self._generation, self.name, data)
        self._written += written
        return written

    def tell(self) -> int:
        self._check_open()
        return self._written

    def flush(self):
        """Payload reaches the archive index on close(); nothing to do here."""
        self._check_open()

    def seek(self, offset, whence=io.SEEK_SET):
        self._check_open()
        raise NonSeekable("file non-seekable", path=self.name)

    def read(self, size=-1):
        self._check_open()
        raise WrongDirection("file is write-only", path=self.name)

    def read_at(self, offset, size):
        self._check_open()
        raise WrongDirection("file is write-only", path=self.name)

    def readinto(self, buffer):
        self._check_open()
        raise WrongDirection("file is write-only", path=self.name)

    def close(self):
        if self._closed:
            return
        self._closed = True
        debug_print(f"WriteFile: closing '{self.name}' after {self._written} bytes", level=2)
        self._session.release_writer(self._generation)
