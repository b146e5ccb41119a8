"""
SivaFS: a filesystem view over siva archives.

A Python library that presents a single append-only siva archive as a
hierarchy of directories and files.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT

Public API:
    - SivaFS: Main entry point (open, create, stat, read_dir, remove, mkdir_all, close).
    - read_file / write_file: whole file helpers.
    - Error types from sivafs.core.errors.

Example usage:
    from sivafs import SivaFS, write_file
    fs = SivaFS('store.siva')
    write_file(fs, 'docs/readme.txt', b'Hello!')
    print(fs.stat('docs'))
    fs.close()
"""

from .sivafs import SivaFS
from .core.errors import (
    AlreadyClosed,
    IndexUnavailable,
    IsADirectory,
    NonSeekable,
    NotADirectory,
    NotEmpty,
    NotFoundError,
    SivaFSError,
    UnsupportedOperation,
    WriterBusy,
    WrongDirection,
)
from .core.file_info import FileInfo
from .core.physical_io import MemoryIO, PhysicalIO
from .core.utils import read_file, write_file

__version__ = '0.1.0'
__all__ = [
    "SivaFS",
    "FileInfo",
    "PhysicalIO",
    "MemoryIO",
    "read_file",
    "write_file",
    "SivaFSError",
    "NotFoundError",
    "NotADirectory",
    "IsADirectory",
    "NotEmpty",
    "UnsupportedOperation",
    "WrongDirection",
    "NonSeekable",
    "WriterBusy",
    "IndexUnavailable",
    "AlreadyClosed",
]
