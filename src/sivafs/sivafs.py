"""
SivaFS: a filesystem view over siva archives.

Exposes directories, files, stat information and listings on top of a single
append-only siva archive. Directories are derived from entry names, files are
written once and never changed in place, and removals are recorded as tombstones.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import os
import time
from typing import Iterator, List, Optional, Tuple

from .api.chroot_api import ChrootFS
from .api.config_api import ConfigAPI
from .core.directory_operations import get_dir, list_dirs, list_files
from .core.errors import (
    IsADirectory,
    NotADirectory,
    NotEmpty,
    NotFoundError,
    UnsupportedOperation,
)
from .core.file_handles import ReadFile, WriteFile
from .core.file_info import FileInfo
from .core.global_config import GlobalConfig
from .core.index import FLAG_DELETED
from .core.logging import debug_print
from .core.path_resolver import ROOT, join, normalize_path, parent_paths
from .core.physical_io import PhysicalIO
from .core.session import ArchiveSession
from .handlers.siva_handler import Header

_ACCESS_MASK = os.O_RDONLY | os.O_WRONLY | os.O_RDWR


class SivaFS:
    """
    Main entry point for a siva backed filesystem.

    The archive is opened (or created) lazily by the first operation. Every
    handle opened for writing must be closed, and close() must be called on the
    filesystem before the program exits, otherwise the archive may be left
    without an index for its last entries.

    Attributes:
        path: Location of the archive in the backing store
        config: Configuration (debug level, default modes, read chunk size)

    Example usage:
        from sivafs import SivaFS
        with SivaFS('repo.siva') as fs:
            with fs.create('objects/ab/cdef') as f:
                f.write(b'data')
            names = [info.name for info in fs.read_dir('objects')]
    """

    def __init__(self, path: str, physical_io: Optional[PhysicalIO] = None):
        """
        Args:
            path: Path of the siva file, relative to the backing store's root
            physical_io: Backing byte store; defaults to the host filesystem
        """
        self.path = path
        self._session = ArchiveSession(physical_io or PhysicalIO(), path)
        self.config = ConfigAPI()

    # --- Context management ---
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # --- Opening files ---
    def create(self, path: str) -> WriteFile:
        """
        Create a new file. Files are always created with CREATE, TRUNCATE and
        WRITE ONLY flags, the only combination a siva archive can honour.
        """
        return self.open_file(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, GlobalConfig.get_default_file_mode())

    def open(self, path: str, mode: str = 'rb'):
        """
        Open a file with a Python style mode string. Only 'rb' and 'wb' are supported.
        """
        if mode == 'rb':
            return self.open_file(path, os.O_RDONLY)
        if mode == 'wb':
            return self.create(path)
        raise UnsupportedOperation(f"mode '{mode}' not supported", path=path)

    def open_file(self, path: str, flags: int, perm: int = 0o666):
        """
        Open a file with os.open style flags.

        Supported combinations are O_RDONLY, and O_WRONLY | O_CREAT | O_TRUNC.

        Raises:
            UnsupportedOperation: append, read-write, create without truncate, or
                write access without create
            WriterBusy: another file is being written
            NotFoundError / IsADirectory / NotADirectory: path conflicts
        """
        path = normalize_path(path)
        self._check_flags(path, flags)

        with self._session.lock:
            self._session.ensure_open()
            if flags & os.O_CREAT:
                return self._create_file(path, perm)
            return self._open_file(path)

    def _check_flags(self, path: str, flags: int) -> None:
        access = flags & _ACCESS_MASK
        reason = None
        if flags & os.O_APPEND:
            reason = "O_APPEND not supported"
        elif access == os.O_RDWR:
            reason = "O_RDWR not supported"
        elif flags & os.O_CREAT and not flags & os.O_TRUNC:
            reason = "O_CREAT without O_TRUNC not supported"
        elif flags & os.O_CREAT and access != os.O_WRONLY:
            reason = "files can only be created write only"
        elif not flags & os.O_CREAT and (access != os.O_RDONLY or flags & os.O_TRUNC):
            reason = "existing files cannot be modified"
        if reason:
            debug_print(f"SivaFS.open_file: rejected '{path}' ({reason})", level=1)
            raise UnsupportedOperation(reason, path=path)

    def _create_file(self, path: str, perm: int) -> WriteFile:
        if not path:
            raise IsADirectory(ROOT)
        self._session.check_writer_free(path)

        index = self._session.index()
        if get_dir(index, path) is not None:
            raise IsADirectory(path)
        for parent in parent_paths(path):
            if index.find(parent) is not None:
                raise NotADirectory(parent)

        generation = self._session.acquire_writer(path)
        try:
            self._session.write_header(Header(name=path, mode=perm, mod_time_ns=time.time_ns()))
        except Exception as e:
            debug_print(f"SivaFS.create: header for '{path}' not written: {e}", level=1, exc=e)
            self._session.release_writer(generation)
            raise
        return WriteFile(path, self._session, generation)

    def _open_file(self, path: str) -> ReadFile:
        index = self._session.index()
        entry = index.find(path)
        if entry is None:
            if get_dir(index, path) is not None:
                raise IsADirectory(path)
            raise NotFoundError(path)
        return ReadFile(path, self._session, self._session.reader(entry))

    # --- Metadata ---
    def stat(self, path: str) -> FileInfo:
        """
        Stat a file or a synthetic directory. A file entry wins over a directory.
        """
        path = normalize_path(path)
        with self._session.lock:
            self._session.ensure_open()
            index = self._session.index()
            entry = index.find(path)
            if entry is not None:
                return FileInfo.from_entry(entry)
            info = get_dir(index, path)
            if info is None:
                raise NotFoundError(path)
            return info

    def exists(self, path: str) -> bool:
        try:
            self.stat(path)
        except NotFoundError:
            return False
        return True

    def read_dir(self, path: str = ROOT) -> List[FileInfo]:
        """
        List a directory: synthetic subdirectories first, then files, each sorted by name.
        A path with nothing beneath it lists as empty.
        """
        path = normalize_path(path)
        with self._session.lock:
            self._session.ensure_open()
            index = self._session.index()
            dirs = list_dirs(index, path)
            files = list_files(index, path)
            if not dirs and not files and path and index.find(path) is not None:
                raise NotADirectory(path)
            return dirs + files

    def walk(self, top: str = ROOT) -> Iterator[Tuple[str, List[str], List[str]]]:
        """
        Walk the directory tree like os.walk, yielding (dirpath, dirnames, filenames).
        """
        top = normalize_path(top)
        infos = self.read_dir(top)
        dirnames = [info.name for info in infos if info.is_dir]
        filenames = [info.name for info in infos if not info.is_dir]
        yield top, dirnames, filenames
        for name in dirnames:
            yield from self.walk(join(top, name))

    def glob(self, pattern: str) -> List[FileInfo]:
        """
        Return the files whose full name matches `pattern`. Wildcards do not match '/'.
        """
        pattern = normalize_path(pattern)
        with self._session.lock:
            self._session.ensure_open()
            return [FileInfo.from_entry(entry) for entry in self._session.index().glob(pattern)]

    # --- Structure ---
    def mkdir_all(self, path: str, perm: int = 0o755) -> None:
        """
        Directories cannot be stored, so this only checks that `path` is not a file.
        """
        path = normalize_path(path)
        with self._session.lock:
            self._session.ensure_open()
            if self._session.index().find(path) is not None:
                raise NotADirectory(path)

    def remove(self, path: str) -> None:
        """
        Remove a file by appending a tombstone for it.

        Raises:
            NotEmpty: `path` is a directory with entries beneath it
            NotFoundError: nothing exists at `path`
            WriterBusy: a file is being written
        """
        path = normalize_path(path)
        with self._session.lock:
            self._session.ensure_open()
            index = self._session.index()
            if index.find(path) is not None:
                self._session.check_writer_free(path)
                self._session.write_header(Header(
                    name=path,
                    mode=0,
                    mod_time_ns=time.time_ns(),
                    flags=FLAG_DELETED,
                ))
                return
            if get_dir(index, path) is not None:
                raise NotEmpty(path)
            raise NotFoundError(path)

    def rename(self, old_path: str, new_path: str) -> None:
        raise UnsupportedOperation("rename not supported", path=old_path)

    def temp_file(self, dir_path: str = ROOT, prefix: str = ""):
        raise UnsupportedOperation("temporary files not supported", path=dir_path)

    def symlink(self, target: str, link: str) -> None:
        raise UnsupportedOperation("symbolic links not supported", path=link)

    # --- Paths ---
    def join(self, *elems: str) -> str:
        """Join the specified elements using the filesystem separator."""
        return join(*elems)

    def base(self) -> str:
        return ROOT

    def dir(self, path: str) -> ChrootFS:
        """Return a view of this filesystem rooted at `path`."""
        return ChrootFS(self, normalize_path(path))

    # --- Durability ---
    def sync(self) -> None:
        """
        Write the index for everything appended so far without closing the archive.
        """
        with self._session.lock:
            if not self._session.is_open:
                return
            self._session.check_writer_free(self.path)
            self._session.flush()

    def close(self) -> None:
        """Flush and close the archive. Safe to call more than once."""
        self._session.ensure_closed()
