"""
Chroot operations for SivaFS.
A view over a SivaFS instance where every path is resolved below a fixed directory.

Author: Tim Hosking
Contact: https://github.com/Munger
License: MIT
"""

from typing import List

from sivafs.core.path_resolver import ROOT, add_trailing_slash, join, normalize_path


class ChrootFS:
    """
    SivaFS Public API: sub-directory view. Obtained through SivaFS.dir(path).
    This class is not meant to be constructed directly.
    """

    def __init__(self, fs, root: str):
        self._fs = fs
        self._root = root

    def _full(self, path: str) -> str:
        return join(self._root, normalize_path(path))

    def _relative(self, info):
        prefix = add_trailing_slash(self._root)
        if prefix and info.path.startswith(prefix):
            return info._replace(path=info.path[len(prefix):])
        if info.path == self._root:
            return info._replace(path="")
        return info

    def create(self, path: str):
        return self._fs.create(self._full(path))

    def open(self, path: str, mode: str = 'rb'):
        return self._fs.open(self._full(path), mode)

    def open_file(self, path: str, flags: int, perm: int = 0o666):
        return self._fs.open_file(self._full(path), flags, perm)

    def stat(self, path: str):
        return self._relative(self._fs.stat(self._full(path)))

    def exists(self, path: str) -> bool:
        return self._fs.exists(self._full(path))

    def read_dir(self, path: str = ROOT) -> List:
        return [self._relative(info) for info in self._fs.read_dir(self._full(path))]

    def glob(self, pattern: str) -> List:
        return [self._relative(info) for info in self._fs.glob(self._full(pattern))]

    def mkdir_all(self, path: str, perm: int = 0o755) -> None:
        self._fs.mkdir_all(self._full(path), perm)

    def remove(self, path: str) -> None:
        self._fs.remove(self._full(path))

    def rename(self, old_path: str, new_path: str) -> None:
        self._fs.rename(self._full(old_path), self._full(new_path))

    def temp_file(self, dir_path: str = ROOT, prefix: str = ""):
        return self._fs.temp_file(self._full(dir_path), prefix)

    def symlink(self, target: str, link: str) -> None:
        self._fs.symlink(target, self._full(link))

    def join(self, *elems: str) -> str:
        return join(*elems)

    def base(self) -> str:
        return self._fs.join(self._fs.base(), self._root)

    def dir(self, path: str) -> 'ChrootFS':
        return ChrootFS(self._fs, self._full(path))
