"""
Stat information for SivaFS entries and synthetic directories.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import stat
from typing import NamedTuple

from sivafs.core.global_config import GlobalConfig
from sivafs.core.index import IndexEntry
from sivafs.core.path_resolver import basename


class FileInfo(NamedTuple):
    """Information about a file entry or a synthetic directory."""
    name: str
    path: str
    size: int
    mode: int
    mod_time: float
    is_dir: bool

    @property
    def is_file(self) -> bool:
        return not self.is_dir

    @classmethod
    def from_entry(cls, entry: IndexEntry) -> 'FileInfo':
        return cls(
            name=basename(entry.name),
            path=entry.name,
            size=entry.size,
            mode=entry.mode,
            mod_time=entry.mod_time,
            is_dir=False,
        )

    @classmethod
    def for_dir(cls, path: str, mod_time: float) -> 'FileInfo':
        return cls(
            name=basename(path),
            path=path,
            size=0,
            mode=stat.S_IFDIR | GlobalConfig.get_dir_mode(),
            mod_time=mod_time,
            is_dir=True,
        )
