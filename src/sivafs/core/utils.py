"""
Utility functions for SivaFS.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

import os
from typing import Optional, Union


def write_file(fs, path: str, data: Union[bytes, str], perm: Optional[int] = None, encoding: str = 'utf-8') -> int:
    """
    Create `path` on `fs` holding `data`, then close it.

    Args:
        fs: SivaFS instance (or a view returned by SivaFS.dir)
        path: File path
        data: Contents; str is encoded with `encoding`
        perm: Mode recorded for the file (defaults to the configured default_file_mode)

    Returns:
        Number of bytes written
    """
    if isinstance(data, str):
        data = data.encode(encoding)
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    if perm is None:
        f = fs.create(path)
    else:
        f = fs.open_file(path, flags, perm)
    with f:
        return f.write(data)


def read_file(fs, path: str, encoding: Optional[str] = None) -> Union[bytes, str]:
    """
    Read the whole of `path` from `fs`. Returns str when `encoding` is given.
    """
    with fs.open(path, 'rb') as f:
        data = f.read()
    if encoding is not None:
        return data.decode(encoding)
    return data
