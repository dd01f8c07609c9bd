"""Filesystem boundary checks for the graph root.

Every path the service reads or writes goes through PathGuard:

- resolve() keeps paths inside the root, both lexically and after following
  any symlinked parent directories
- ensure_not_symlink() refuses to touch a symbolic link
- ensure_regular_single_link() additionally refuses anything that is not a
  plain file, or that has more than one hard link (a file planted elsewhere
  and hard-linked into the graph)
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from .errors import LinkAttack, PathEscape

log = logging.getLogger(__name__)


class PathGuard:
    """Confines filesystem access to a single graph root."""

    def __init__(self, root: Path, allow_hardlinks: bool = False) -> None:
        self.root = Path(os.path.realpath(root))
        self.allow_hardlinks = allow_hardlinks

    def is_within_root(self, path: str | os.PathLike) -> bool:
        root = str(self.root)
        candidate = str(path)
        return candidate == root or os.path.commonpath([root, candidate]) == root

    def resolve(self, candidate: str | os.PathLike) -> Path:
        """Resolve a path relative to the root and confirm it stays inside.

        Relative candidates are joined onto the root; absolute candidates are
        taken as-is and therefore rejected unless they point into the root.

        Raises:
            PathEscape: If the normalized path, or the real location of its
                parent directory, lies outside the root.
        """
        absolute = os.path.normpath(os.path.join(self.root, candidate))
        if not self.is_within_root(absolute):
            log.warning("Rejected path outside graph root")
            raise PathEscape("Access denied: path outside graph directory")

        # A symlinked directory along the way could still lead outside
        parent = os.path.dirname(absolute)
        if absolute != str(self.root) and os.path.exists(parent):
            if not self.is_within_root(os.path.realpath(parent)):
                log.warning("Rejected path through a directory outside graph root")
                raise PathEscape("Access denied: path outside graph directory")

        return Path(absolute)

    def ensure_not_symlink(self, path: Path) -> None:
        """Fail if an entry exists at path and is a symbolic link.

        A missing entry is fine: this check runs before files are created.
        """
        try:
            st = os.lstat(path)
        except FileNotFoundError:
            return
        if stat.S_ISLNK(st.st_mode):
            log.warning("Refused symbolic link inside graph: %s", path.name)
            raise LinkAttack("Access denied: symbolic links not allowed")

    def ensure_regular_single_link(self, path: Path) -> None:
        """Fail unless path is a plain file with exactly one hard link.

        Raises:
            LinkAttack: For symlinks, directories, devices, sockets, FIFOs and
                (unless allow_hardlinks) files with st_nlink > 1.
            FileNotFoundError: If nothing exists at path.
        """
        st = os.lstat(path)

        if stat.S_ISLNK(st.st_mode):
            raise LinkAttack("Access denied: symbolic links not allowed")

        if not stat.S_ISREG(st.st_mode):
            raise LinkAttack("Access denied: not a regular file")

        if st.st_nlink > 1 and not self.allow_hardlinks:
            raise LinkAttack("Access denied: hardlinks not allowed")

    def relative(self, path: Path) -> str:
        """Return path relative to the root in POSIX form."""
        return Path(path).relative_to(self.root).as_posix()
