"""
Unit tests for the SivaFS siva archive handler.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""
import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))
import shutil
import tempfile
import zlib

import pytest

from sivafs.core.errors import IndexUnavailable, UnsupportedOperation
from sivafs.core.index import FLAG_DELETED
from sivafs.handlers.siva_handler import FOOTER, Header, SivaHandler


@pytest.fixture(scope="function")
def temp_dir():
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d)


def write_entries(path, entries):
    """Write (name, data) pairs as one block and return nothing."""
    with open(path, 'r+b' if os.path.exists(path) else 'w+b') as f:
        handler = SivaHandler(f)
        for name, data in entries:
            handler.write_header(Header(name=name, mode=0o644, mod_time_ns=1_000_000_000))
            handler.write(data)
        handler.close()


def open_handler(path):
    f = open(path, 'r+b')
    return f, SivaHandler(f)


def test_empty_archive_has_empty_index(temp_dir):
    path = os.path.join(temp_dir, "empty.siva")
    open(path, 'wb').close()
    f, handler = open_handler(path)
    with f:
        assert handler.index() == []


def test_write_then_read_back(temp_dir):
    path = os.path.join(temp_dir, "test.siva")
    write_entries(path, [("a.txt", b"hello"), ("dir/b.txt", b""), ("c.bin", os.urandom(4096))])

    f, handler = open_handler(path)
    with f:
        index = handler.index()
        assert [e.name for e in index] == ["a.txt", "dir/b.txt", "c.bin"]
        entry = index.find("a.txt")
        assert entry.size == 5
        assert entry.mode == 0o644
        assert entry.mod_time == 1.0
        assert entry.crc32 == zlib.crc32(b"hello")
        assert handler.get(entry).read_at(0, 100) == b"hello"
        assert handler.get(entry).read_at(1, 3) == b"ell"
        assert handler.get(index.find("dir/b.txt")).read_at(0, 10) == b""


def test_blocks_are_appended_in_order(temp_dir):
    path = os.path.join(temp_dir, "blocks.siva")
    write_entries(path, [("x", b"first")])
    write_entries(path, [("x", b"second"), ("y", b"why")])

    f, handler = open_handler(path)
    with f:
        index = handler.index()
        assert [e.name for e in index] == ["x", "x", "y"]
        latest = index.find("x")
        assert handler.get(latest).read_at(0, 100) == b"second"


def test_pending_entry_is_visible_before_flush(temp_dir):
    path = os.path.join(temp_dir, "pending.siva")
    with open(path, 'w+b') as f:
        handler = SivaHandler(f)
        handler.write_header(Header(name="p", mode=0o600, mod_time_ns=5))
        assert handler.index().find("p").size == 0
        handler.write(b"abc")
        entry = handler.index().find("p")
        assert entry.size == 3
        assert handler.get(entry).read_at(0, 3) == b"abc"
        handler.close()
        # Nothing but payload is written until the block is flushed
        assert os.path.getsize(path) > 3


def test_flush_without_entries_writes_nothing(temp_dir):
    path = os.path.join(temp_dir, "noop.siva")
    with open(path, 'w+b') as f:
        handler = SivaHandler(f)
        handler.flush()
        handler.close()
    assert os.path.getsize(path) == 0


def test_tombstone_is_stored_and_filtered(temp_dir):
    path = os.path.join(temp_dir, "tomb.siva")
    write_entries(path, [("gone", b"data"), ("kept", b"data")])
    with open(path, 'r+b') as f:
        handler = SivaHandler(f)
        handler.write_header(Header(name="gone", mode=0, mod_time_ns=7, flags=FLAG_DELETED))
        handler.close()

    f, handler = open_handler(path)
    with f:
        raw = handler.index()
        assert len(raw) == 3
        assert raw[-1].is_deleted
        assert [e.name for e in raw.filter()] == ["kept"]


def test_payload_after_tombstone_rejected(temp_dir):
    path = os.path.join(temp_dir, "tomb.siva")
    with open(path, 'w+b') as f:
        handler = SivaHandler(f)
        handler.write_header(Header(name="gone", mode=0, mod_time_ns=7, flags=FLAG_DELETED))
        with pytest.raises(UnsupportedOperation):
            handler.write(b"nope")


def test_write_without_header_rejected(temp_dir):
    path = os.path.join(temp_dir, "nohdr.siva")
    with open(path, 'w+b') as f:
        handler = SivaHandler(f)
        with pytest.raises(UnsupportedOperation):
            handler.write(b"data")


def test_closed_handler_rejects_writes(temp_dir):
    path = os.path.join(temp_dir, "closed.siva")
    with open(path, 'w+b') as f:
        handler = SivaHandler(f)
        handler.close()
        handler.close()
        with pytest.raises(ValueError):
            handler.write_header(Header(name="late", mode=0, mod_time_ns=0))


@pytest.mark.parametrize("garbage", [
    b"x",
    b"not a siva archive at all, just some bytes",
    b"\x00" * FOOTER.size,
])
def test_corrupt_archive_index_unavailable(temp_dir, garbage):
    path = os.path.join(temp_dir, "corrupt.siva")
    with open(path, 'wb') as f:
        f.write(garbage)
    f, handler = open_handler(path)
    with f:
        with pytest.raises(IndexUnavailable):
            handler.index()


def test_index_checksum_mismatch(temp_dir):
    path = os.path.join(temp_dir, "flipped.siva")
    write_entries(path, [("name", b"payload")])
    with open(path, 'r+b') as f:
        # First byte of the entry name inside the index
        f.seek(len(b"payload") + 4 + 4)
        f.write(b"N")
    f, handler = open_handler(path)
    with f:
        with pytest.raises(IndexUnavailable):
            handler.index()


def test_unicode_names(temp_dir):
    path = os.path.join(temp_dir, "unicode.siva")
    write_entries(path, [("música/ñ.txt", b"la")])
    f, handler = open_handler(path)
    with f:
        assert handler.index()[0].name == "música/ñ.txt"


@pytest.mark.parametrize("header", [
    Header(name="bad\udcff", mode=0o644, mod_time_ns=1),
    Header(name="huge-mode", mode=1 << 40, mod_time_ns=1),
    Header(name="negative-mode", mode=-1, mod_time_ns=1),
    Header(name="huge-flags", mode=0o644, mod_time_ns=1, flags=1 << 33),
])
def test_unencodable_header_rejected_before_append(temp_dir, header):
    path = os.path.join(temp_dir, "bad.siva")
    write_entries(path, [("good", b"keep me")])
    f, handler = open_handler(path)
    with f:
        handler.write_header(Header(name="pending", mode=0o644, mod_time_ns=2))
        handler.write(b"still here")
        with pytest.raises(UnsupportedOperation):
            handler.write_header(header)
        assert [e.name for e in handler.index()] == ["good", "pending"]
        handler.write(b"!")
        handler.close()

    f, handler = open_handler(path)
    with f:
        index = handler.index()
        assert [e.name for e in index] == ["good", "pending"]
        assert handler.get(index.find("good")).read_at(0, 100) == b"keep me"
        assert handler.get(index.find("pending")).read_at(0, 100) == b"still here!"
