"""
Siva archive handler for SivaFS.
Reads and appends the block based siva container: a sequence of blocks, each made
of entry payloads followed by an index and a fixed size footer. Nothing already
written is ever modified; overwrites and deletions are new index entries.

Block layout (all integers big-endian):

    payload bytes ...
    index:  b'IBA' + version byte
            per entry: name length (u32), name (utf-8), mode (u32),
                       mod time ns (i64), flags (u32), start (u64, block relative),
                       size (u64), crc32 (u32)
    footer: entry count (u32), index size (u64), block size (u64), index crc32 (u32)

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import io
import struct
import zlib
from typing import BinaryIO, List, NamedTuple, Optional

from sivafs.core.errors import IndexUnavailable, UnsupportedOperation
from sivafs.core.index import FLAG_DELETED, Index, IndexEntry
from sivafs.core.logging import debug_print

SIGNATURE = b'IBA'
VERSION = 1
FOOTER = struct.Struct('>IQQI')
ENTRY_FIELDS = struct.Struct('>IqIQQI')
NAME_LENGTH = struct.Struct('>I')


class Header(NamedTuple):
    """Metadata written ahead of an entry's payload."""
    name: str
    mode: int
    mod_time_ns: int
    flags: int = 0

    @property
    def is_deleted(self) -> bool:
        return bool(self.flags & FLAG_DELETED)


class SectionReader:
    """
    Random access view over a byte range of the archive file.
    Callers serialize access to the shared file object.
    """

    def __init__(self, fileobj: BinaryIO, start: int, size: int):
        self._fileobj = fileobj
        self._start = start
        self.size = size

    def read_at(self, offset: int, size: int) -> bytes:
        """Read up to `size` bytes starting `offset` bytes into the section."""
        if offset < 0:
            raise ValueError("negative offset")
        if offset >= self.size or size == 0:
            return b''
        size = min(size, self.size - offset)
        self._fileobj.seek(self._start + offset)
        return self._fileobj.read(size)


class _Pending:
    """Entry whose header is written and whose payload is still growing."""

    def __init__(self, header: Header, start: int):
        self.header = header
        self.start = start
        self.size = 0
        self.crc32 = 0

    def to_entry(self) -> IndexEntry:
        return IndexEntry(
            name=self.header.name,
            mode=self.header.mode,
            mod_time_ns=self.header.mod_time_ns,
            flags=self.header.flags,
            start=self.start,
            size=self.size,
            crc32=self.crc32,
        )


class SivaHandler:
    """
    Reader/writer over one siva archive file.

    The file object must be opened for binary reading and writing. The handler
    never closes it; whoever opened the file owns it.
    """

    def __init__(self, fileobj: BinaryIO):
        self._fileobj = fileobj
        self._fileobj.seek(0, io.SEEK_END)
        self._end = self._fileobj.tell()
        self._block_start = self._end
        self._disk_index: Optional[List[IndexEntry]] = None
        self._block_entries: List[IndexEntry] = []
        self._pending: Optional[_Pending] = None
        self._closed = False

    # --- Reading ---
    def index(self) -> Index:
        """
        Return every entry in append order: the ones already on disk, then the ones
        written since the last flush, including the entry currently being written.
        """
        if self._disk_index is None:
            self._disk_index = self._read_disk_index()
        entries = Index(self._disk_index)
        entries.extend(self._block_entries)
        if self._pending is not None:
            entries.append(self._pending.to_entry())
        return entries

    def get(self, entry: IndexEntry) -> SectionReader:
        """Return a random access reader over the payload of `entry`."""
        return SectionReader(self._fileobj, entry.start, entry.size)

    def _read_disk_index(self) -> List[IndexEntry]:
        blocks = []
        position = self._block_start
        while position > 0:
            entries, block_size = self._read_block(position)
            blocks.append(entries)
            position -= block_size
        blocks.reverse()
        index = [entry for block in blocks for entry in block]
        debug_print(f"SivaHandler: read {len(index)} entries in {len(blocks)} blocks", level=2)
        return index

    def _read_block(self, block_end: int):
        if block_end < FOOTER.size:
            raise IndexUnavailable(message="truncated block footer")
        self._fileobj.seek(block_end - FOOTER.size)
        count, index_size, block_size, index_crc = FOOTER.unpack(self._fileobj.read(FOOTER.size))
        if block_size > block_end or index_size + FOOTER.size > block_size or index_size < len(SIGNATURE) + 1:
            raise IndexUnavailable(message="inconsistent block footer")

        index_start = block_end - FOOTER.size - index_size
        self._fileobj.seek(index_start)
        raw = self._fileobj.read(index_size)
        if len(raw) != index_size or zlib.crc32(raw) != index_crc:
            raise IndexUnavailable(message="index checksum mismatch")
        if raw[:3] != SIGNATURE or raw[3] != VERSION:
            raise IndexUnavailable(message="invalid index signature")

        block_start = block_end - block_size
        data_size = block_size - index_size - FOOTER.size
        entries = []
        offset = 4
        try:
            for _ in range(count):
                (name_length,) = NAME_LENGTH.unpack_from(raw, offset)
                offset += NAME_LENGTH.size
                name = raw[offset:offset + name_length].decode('utf-8')
                offset += name_length
                mode, mod_time_ns, flags, start, size, crc = ENTRY_FIELDS.unpack_from(raw, offset)
                offset += ENTRY_FIELDS.size
                if start + size > data_size:
                    raise IndexUnavailable(message=f"entry '{name}' outside of its block")
                entries.append(IndexEntry(name, mode, mod_time_ns, flags, block_start + start, size, crc))
        except (struct.error, UnicodeDecodeError) as e:
            raise IndexUnavailable(message=f"malformed index entry: {e}") from e
        return entries, block_size

    # --- Writing ---
    def write_header(self, header: Header) -> None:
        """
        Start a new entry. Any entry still being written is finished first.
        The new entry shows up in index() straight away, with size zero.
        """
        self._check_open()
        self._check_header(header)
        self._finish_pending()
        self._pending = _Pending(header, self._end)
        debug_print(f"SivaHandler: header appended for '{header.name}' (flags={header.flags})", level=2)

    def write(self, data: bytes) -> int:
        """Append payload bytes to the entry started by the last write_header()."""
        self._check_open()
        if self._pending is None:
            raise UnsupportedOperation("no entry header written before payload")
        if self._pending.header.is_deleted:
            raise UnsupportedOperation("tombstone entries carry no payload", path=self._pending.header.name)
        data = bytes(data)
        self._fileobj.seek(self._end)
        self._fileobj.write(data)
        self._end += len(data)
        self._pending.size += len(data)
        self._pending.crc32 = zlib.crc32(data, self._pending.crc32)
        return len(data)

    def flush(self) -> None:
        """Finish the pending entry and close the current block with its index and footer."""
        self._check_open()
        self._finish_pending()
        if not self._block_entries:
            return
        index = self._encode_index(self._block_entries)
        block_size = self._end - self._block_start + len(index) + FOOTER.size
        footer = FOOTER.pack(len(self._block_entries), len(index), block_size, zlib.crc32(index))
        self._fileobj.seek(self._end)
        self._fileobj.write(index)
        self._fileobj.write(footer)
        self._fileobj.flush()
        self._end += len(index) + len(footer)
        self._block_start = self._end
        if self._disk_index is not None:
            self._disk_index.extend(self._block_entries)
        debug_print(f"SivaHandler: flushed block with {len(self._block_entries)} entries", level=2)
        self._block_entries = []

    def close(self) -> None:
        """Flush outstanding entries. Safe to call more than once."""
        if self._closed:
            return
        self.flush()
        self._closed = True

    def _finish_pending(self) -> None:
        if self._pending is not None:
            self._block_entries.append(self._pending.to_entry())
            self._pending = None

    @staticmethod
    def _check_header(header: Header) -> None:
        # A header that cannot be encoded would break every later flush of the block.
        try:
            name = header.name.encode('utf-8')
            NAME_LENGTH.pack(len(name))
            ENTRY_FIELDS.pack(header.mode, header.mod_time_ns, header.flags, 0, 0, 0)
        except UnicodeEncodeError as e:
            raise UnsupportedOperation(f"entry name is not valid UTF-8: {e.reason}", path=header.name) from e
        except struct.error as e:
            raise UnsupportedOperation(f"header fields out of range: {e}", path=header.name) from e

    def _encode_index(self, entries: List[IndexEntry]) -> bytes:
        out = bytearray(SIGNATURE)
        out.append(VERSION)
        for entry in entries:
            name = entry.name.encode('utf-8')
            out += NAME_LENGTH.pack(len(name))
            out += name
            out += ENTRY_FIELDS.pack(
                entry.mode, entry.mod_time_ns, entry.flags,
                entry.start - self._block_start, entry.size, entry.crc32,
            )
        return bytes(out)

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("siva handler is closed")
