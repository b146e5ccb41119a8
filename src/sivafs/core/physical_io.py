"""
physical_io.py
Backing byte stores for SivaFS: the host file that holds a siva archive, or an
in-memory stand-in for it.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import errno
import io
import os
import posixpath
import threading
from typing import BinaryIO, Dict, Optional

from sivafs.core.logging import debug_print

_ACCESS_MODES = {
    os.O_RDONLY: 'rb',
    os.O_WRONLY: 'wb',
    os.O_RDWR: 'r+b',
}


class PhysicalIO:
    """
    Opens files on the host filesystem, relative to an optional root directory.
    """

    def __init__(self, root: Optional[str] = None):
        self.root = os.path.abspath(root) if root else None

    def resolve(self, path: str) -> str:
        if self.root is None:
            return os.path.abspath(path)
        return os.path.join(self.root, path.lstrip('/\\'))

    def open_file(self, path: str, flags: int, mode: int = 0o666) -> BinaryIO:
        """
        Open `path` with os.open style flags and return a binary file object.

        Parent directories are created when O_CREAT is given.
        """
        full_path = self.resolve(path)
        debug_print(f"[PhysicalIO.open_file] path={full_path}, flags={flags:#o}, mode={mode:#o}", level=2)
        if flags & os.O_CREAT:
            parent = os.path.dirname(full_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
        access = flags & (os.O_RDONLY | os.O_WRONLY | os.O_RDWR)
        fd = os.open(full_path, flags | getattr(os, 'O_BINARY', 0), mode)
        try:
            return os.fdopen(fd, _ACCESS_MODES.get(access, 'r+b'))
        except Exception:
            os.close(fd)
            raise


class _MemoryFile(io.BytesIO):
    """Buffer that commits its contents back to the owning MemoryIO on flush and close."""

    def __init__(self, store: "MemoryIO", path: str, initial: bytes):
        super().__init__(initial)
        self._store = store
        self._path = path

    def flush(self):
        super().flush()
        if not self.closed:
            self._store._files[self._path] = self.getvalue()

    def close(self):
        if not self.closed:
            self.flush()
        super().close()


class MemoryIO:
    """
    In-memory backing store. Files outlive the handles opened on them, so an
    archive closed and reopened through the same MemoryIO keeps its entries.
    """

    def __init__(self):
        self._files: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def resolve(self, path: str) -> str:
        return posixpath.normpath('/' + path.replace('\\', '/'))

    def exists(self, path: str) -> bool:
        return self.resolve(path) in self._files

    def open_file(self, path: str, flags: int, mode: int = 0o666) -> BinaryIO:
        key = self.resolve(path)
        debug_print(f"[MemoryIO.open_file] path={key}, flags={flags:#o}", level=2)
        with self._lock:
            if key in self._files:
                if flags & os.O_CREAT and flags & os.O_EXCL:
                    raise FileExistsError(errno.EEXIST, "File exists", path)
                initial = b'' if flags & os.O_TRUNC else self._files[key]
            elif flags & os.O_CREAT:
                initial = b''
            else:
                raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
            self._files[key] = initial
        return _MemoryFile(self, key, initial)
