"""
Path normalization for SivaFS.
Turns caller supplied paths into archive keys: slash delimited, no leading slash,
with '.' and '..' resolved against the archive root.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import posixpath

from sivafs.core.logging import debug_print

SEPARATOR = "/"
ROOT = "/"


def normalize_path(path: str) -> str:
    """
    Return `path` relative to the archive root.

    Only '/' separates segments; a backslash is an ordinary name character.
    '..' never climbs above the root.

    Args:
        path: Caller supplied path

    Returns:
        Archive key; the root itself is the empty string
    """
    if path is None:
        raise ValueError("Path cannot be None")
    normalized = remove_leading_slash(posixpath.normpath(posixpath.join(ROOT, path)))
    debug_print(f"[normalize_path] {path!r} -> {normalized!r}", level=3)
    return normalized


def remove_leading_slash(path: str) -> str:
    """Remove the leading slashes of the path, if any."""
    return path.lstrip(SEPARATOR)


def add_trailing_slash(path: str) -> str:
    """Add a trailing slash to a non-empty path that does not have one."""
    if not path:
        return path
    if not path.endswith(SEPARATOR):
        path = path + SEPARATOR
    return path


def join(*elems: str) -> str:
    """Join path elements with the archive separator, skipping empty ones."""
    parts = [e for e in elems if e]
    if not parts:
        return ""
    return posixpath.join(*parts)


def parent_paths(path: str):
    """
    Yield every proper ancestor of a normalized path, nearest first.
    The root (empty string) is not included.

    >>> list(parent_paths("a/b/c"))
    ['a/b', 'a']
    """
    parent = posixpath.dirname(path)
    while parent:
        yield parent
        parent = posixpath.dirname(parent)


def basename(path: str) -> str:
    return posixpath.basename(path)
