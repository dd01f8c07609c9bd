"""Opt-in in-memory cache of the page index and its backlinks.

Disabled by default: every query then rescans the graph. When enabled, the
cached index is reused only while the tree signature (every page file's
name, size, inode and mtime, plus each folder's mtime) is unchanged.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING, Callable

from .index import FOLDERS, iter_page_files
from .models import PageMetadata

if TYPE_CHECKING:
    from .safety import PathGuard

log = logging.getLogger(__name__)

TreeSignature = tuple[tuple[str, int, int, int], ...]


def tree_signature(guard: PathGuard) -> TreeSignature:
    parts: list[tuple[str, int, int, int]] = []
    for folder_name, _ in FOLDERS:
        folder = guard.root / folder_name
        try:
            folder_stat = os.lstat(folder)
        except FileNotFoundError:
            continue
        parts.append((folder_name, folder_stat.st_mtime_ns, 0, 0))

        for path in iter_page_files(guard, folder_name):
            try:
                st = os.lstat(path)
            except FileNotFoundError:
                continue
            parts.append(
                (f"{folder_name}/{path.name}", st.st_mtime_ns, st.st_size, st.st_ino)
            )
    return tuple(parts)


class BacklinkCache:
    """Holds the last built index together with the signature it was built from."""

    def __init__(self) -> None:
        self._signature: TreeSignature | None = None
        self._pages: list[PageMetadata] = []
        self._lock = threading.Lock()

    def get_or_build(
        self,
        guard: PathGuard,
        build: Callable[[PathGuard], list[PageMetadata]],
    ) -> list[PageMetadata]:
        signature = tree_signature(guard)
        with self._lock:
            if signature == self._signature:
                log.debug("Backlink cache hit (%d pages)", len(self._pages))
                return [page.model_copy(deep=True) for page in self._pages]

        pages = build(guard)
        with self._lock:
            self._signature = signature
            self._pages = pages
        return [page.model_copy(deep=True) for page in pages]

    def clear(self) -> None:
        with self._lock:
            self._signature = None
            self._pages = []
