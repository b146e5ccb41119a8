"""
Archive session management for SivaFS.
Owns the backing file of one siva archive and the handler reading and writing it.

The session is opened lazily by the first operation and stays open until close()
is called. At most one entry may be written at a time; a second writer is
rejected immediately instead of waiting.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import os
import threading
from typing import Optional

from sivafs.core.errors import AlreadyClosed, WriterBusy
from sivafs.core.index import Index, IndexEntry
from sivafs.core.logging import debug_print
from sivafs.core.physical_io import PhysicalIO
from sivafs.handlers.siva_handler import Header, SectionReader, SivaHandler


class ArchiveSession:
    """
    Lifecycle: unopened -> open (ensure_open) -> unopened (ensure_closed).

    All state changes happen under `lock`. The lock is reentrant so that the
    filesystem facade can hold it across several session calls.
    """

    def __init__(self, physical_io: PhysicalIO, path: str):
        self.path = path
        self.lock = threading.RLock()
        self._physical_io = physical_io
        self._file = None
        self._handler: Optional[SivaHandler] = None
        self._writer_busy = False
        # Bumped on every close so handles from an earlier session cannot touch a later one
        self._generation = 0

    @property
    def is_open(self) -> bool:
        return self._handler is not None

    @property
    def writer_busy(self) -> bool:
        return self._writer_busy

    def ensure_open(self) -> None:
        """Open the archive file (creating it if missing) unless already open."""
        with self.lock:
            if self._handler is not None:
                return
            fileobj = self._physical_io.open_file(self.path, os.O_CREAT | os.O_RDWR, 0o666)
            try:
                handler = SivaHandler(fileobj)
            except Exception as e:
                debug_print(f"ArchiveSession: cannot open '{self.path}': {e}", level=1, exc=e)
                fileobj.close()
                raise
            self._file = fileobj
            self._handler = handler
            debug_print(f"ArchiveSession: opened '{self.path}'", level=2)

    def ensure_closed(self) -> None:
        """Flush and release the handler and the backing file if open. Safe to repeat."""
        with self.lock:
            if self._handler is None:
                return
            self._handler.close()
            self._handler = None
            self._writer_busy = False
            self._generation += 1
            fileobj = self._file
            self._file = None
            fileobj.close()
            debug_print(f"ArchiveSession: closed '{self.path}'", level=2)

    # --- Index access ---
    def raw_index(self) -> Index:
        with self.lock:
            return self._require_handler().index()

    def index(self) -> Index:
        """Build a fresh, tombstone filtered index of the archive."""
        return self.raw_index().filter()

    # --- Writing ---
    def acquire_writer(self, name: str) -> int:
        """
        Claim the single writer slot.

        Returns:
            Session generation the writer is bound to

        Raises:
            WriterBusy: if another entry is being written
        """
        with self.lock:
            self.check_writer_free(name)
            self._writer_busy = True
            debug_print(f"ArchiveSession: writer slot taken for '{name}'", level=2)
            return self._generation

    def check_writer_free(self, name: str) -> None:
        if self._writer_busy:
            debug_print(f"ArchiveSession: rejected '{name}', write already in progress", level=1)
            raise WriterBusy(name)

    def release_writer(self, generation: int) -> None:
        """Flush the archive and free the writer slot held by `generation`."""
        with self.lock:
            if generation != self._generation or not self._writer_busy:
                return
            try:
                self._require_handler().flush()
            finally:
                self._writer_busy = False
                debug_print("ArchiveSession: writer slot released", level=2)

    def write_header(self, header: Header) -> None:
        with self.lock:
            self._require_handler().write_header(header)

    def write(self, generation: int, name: str, data: bytes) -> int:
        with self.lock:
            if generation != self._generation or self._handler is None:
                raise AlreadyClosed(name)
            return self._handler.write(data)

    def flush(self) -> None:
        with self.lock:
            if self._handler is not None:
                self._handler.flush()

    # --- Reading ---
    def reader(self, entry: IndexEntry) -> SectionReader:
        with self.lock:
            return self._require_handler().get(entry)

    def read_at(self, generation: int, name: str, section: SectionReader, offset: int, size: int) -> bytes:
        with self.lock:
            if generation != self._generation or self._handler is None:
                raise AlreadyClosed(name)
            return section.read_at(offset, size)

    @property
    def generation(self) -> int:
        return self._generation

    def _require_handler(self) -> SivaHandler:
        if self._handler is None:
            self.ensure_open()
        return self._handler
