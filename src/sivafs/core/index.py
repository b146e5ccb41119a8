"""
Entry index view for SivaFS.
Wraps the raw, append-ordered list of archive entries and provides tombstone
filtering, exact lookup and glob search over entry names.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

from fnmatch import fnmatchcase
from typing import List, NamedTuple, Optional

FLAG_DELETED = 0x1


class IndexEntry(NamedTuple):
    """One archive resident entry as recorded in an archive index."""
    name: str
    mode: int
    mod_time_ns: int
    flags: int
    start: int  # absolute offset of the payload in the archive file
    size: int
    crc32: int

    @property
    def mod_time(self) -> float:
        return self.mod_time_ns / 1e9

    @property
    def is_deleted(self) -> bool:
        return bool(self.flags & FLAG_DELETED)


def match(pattern: str, name: str) -> bool:
    """
    Shell style match where wildcards never cross a '/'.

    'a/*' matches 'a/b' but not 'a/b/c'; 'a/*/*' matches 'a/b/c'.
    """
    pattern_parts = pattern.split('/')
    name_parts = name.split('/')
    if len(pattern_parts) != len(name_parts):
        return False
    return all(fnmatchcase(n, p) for p, n in zip(pattern_parts, name_parts))


class Index(list):
    """
    Append ordered list of IndexEntry objects.
    Later entries supersede earlier ones with the same name.
    """

    def filter(self) -> 'Index':
        """
        Return a new Index holding only the latest entry of each name,
        dropping names whose latest entry is a tombstone.
        """
        latest = {}
        for position, entry in enumerate(self):
            latest[entry.name] = position
        return Index(
            entry for position, entry in enumerate(self)
            if latest[entry.name] == position and not entry.is_deleted
        )

    def find(self, name: str) -> Optional[IndexEntry]:
        """Return the most recent entry called `name`, or None."""
        for entry in reversed(self):
            if entry.name == name:
                return entry
        return None

    def glob(self, pattern: str) -> List[IndexEntry]:
        """Return entries whose full name matches `pattern`, in index order."""
        return [entry for entry in self if match(pattern, entry.name)]
