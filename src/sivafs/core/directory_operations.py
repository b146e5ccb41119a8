"""
Directory operations for SivaFS.

Siva archives have no directories. Every directory seen through SivaFS, the
root included, is derived from the names of the entries below it and is never
stored. A directory with no live entries under it does not exist.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

from typing import Dict, List, Optional

from sivafs.core.file_info import FileInfo
from sivafs.core.index import Index
from sivafs.core.logging import debug_print
from sivafs.core.path_resolver import SEPARATOR, add_trailing_slash, join


def _nested(index: Index, dir_path: str):
    prefix = add_trailing_slash(dir_path)
    for entry in index:
        if entry.name.startswith(prefix) and len(entry.name) > len(prefix):
            yield entry, entry.name[len(prefix):]


def list_files(index: Index, dir_path: str) -> List[FileInfo]:
    """
    List the entries directly inside `dir_path`.

    Args:
        index: Filtered archive index
        dir_path: Normalized directory path ('' for the root)

    Returns:
        FileInfo objects sorted by name
    """
    files = [FileInfo.from_entry(entry) for entry, rest in _nested(index, dir_path) if SEPARATOR not in rest]
    files.sort(key=lambda info: info.name)
    return files


def list_dirs(index: Index, dir_path: str) -> List[FileInfo]:
    """
    List the synthetic directories directly inside `dir_path`.

    Each directory's modification time is the newest modification time of
    any entry nested under it, at whatever depth.
    """
    dirs: Dict[str, float] = {}
    for entry, rest in _nested(index, dir_path):
        if SEPARATOR not in rest:
            continue
        child = join(dir_path, rest.split(SEPARATOR, 1)[0])
        if child not in dirs or dirs[child] < entry.mod_time:
            dirs[child] = entry.mod_time
    debug_print(f"[list_dirs] {dir_path!r}: {len(dirs)} directories", level=3)
    return [FileInfo.for_dir(path, mod_time) for path, mod_time in sorted(dirs.items())]


def get_dir(index: Index, dir_path: str) -> Optional[FileInfo]:
    """
    Return the synthetic directory `dir_path`, or None when no entry lives under it.
    """
    newest = None
    for entry, _ in _nested(index, dir_path):
        if newest is None or newest < entry.mod_time:
            newest = entry.mod_time
    if newest is None:
        return None
    return FileInfo.for_dir(dir_path, newest)
