"""Page index built from the pages/ and journals/ folders.

The index is rebuilt from disk on every call. Files may be edited, added or
removed by Logseq (or anything else) between requests, so nothing derived from
them is trusted across calls unless the opt-in cache confirms the tree is
unchanged.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from .config import JOURNALS_DIR, PAGE_SUFFIX, PAGES_DIR
from .models import Folder, PageMetadata
from .parser import extract_links, extract_tags

if TYPE_CHECKING:
    from .backlinks_cache import BacklinkCache
    from .safety import PathGuard

log = logging.getLogger(__name__)

FOLDERS: tuple[tuple[str, bool], ...] = ((PAGES_DIR, False), (JOURNALS_DIR, True))


def iter_page_files(guard: PathGuard, folder_name: str) -> list[Path]:
    """List the .md files of a folder in sorted order, skipping symlinks.

    A missing folder yields no files.
    """
    folder = guard.resolve(folder_name)
    try:
        folder_stat = os.lstat(folder)
    except FileNotFoundError:
        return []

    if stat.S_ISLNK(folder_stat.st_mode):
        log.warning("Skipping symlinked folder: %s", folder_name)
        return []
    if not stat.S_ISDIR(folder_stat.st_mode):
        return []

    files: list[Path] = []
    for entry in sorted(os.listdir(folder)):
        if not entry.endswith(PAGE_SUFFIX):
            continue
        path = folder / entry
        try:
            entry_stat = os.lstat(path)
        except FileNotFoundError:
            continue
        if stat.S_ISLNK(entry_stat.st_mode):
            log.debug("Skipping symlink in index: %s/%s", folder_name, entry)
            continue
        if not stat.S_ISREG(entry_stat.st_mode):
            continue
        files.append(path)
    return files


def collect_pages(guard: PathGuard) -> list[PageMetadata]:
    """Parse every page in the graph into metadata (backlinks left empty)."""
    pages: list[PageMetadata] = []

    for folder_name, is_journal in FOLDERS:
        for path in iter_page_files(guard, folder_name):
            try:
                content = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                # Removed between listing and reading
                continue
            except (OSError, UnicodeDecodeError) as e:
                log.debug("Skipping unreadable page %s: %s", path.name, e)
                continue

            pages.append(
                PageMetadata(
                    path=f"{folder_name}/{path.name}",
                    name=path.name[: -len(PAGE_SUFFIX)],
                    tags=extract_tags(content),
                    links=extract_links(content),
                    is_journal=is_journal,
                )
            )

    return pages


def build_backlink_map(pages: list[PageMetadata]) -> dict[str, list[str]]:
    """Invert the link relation: target name -> names of linking pages.

    Sources appear in the order the pages were discovered.
    """
    backlinks: dict[str, list[str]] = {}
    for page in pages:
        for link in page.links:
            backlinks.setdefault(link, []).append(page.name)
    return backlinks


def build_index(guard: PathGuard) -> list[PageMetadata]:
    """Collect all pages and populate their backlinks."""
    pages = collect_pages(guard)
    backlinks = build_backlink_map(pages)
    return [
        page.model_copy(update={"backlinks": list(backlinks.get(page.name, []))})
        for page in pages
    ]


def list_pages(
    guard: PathGuard,
    folder: Folder | None = None,
    cache: BacklinkCache | None = None,
) -> list[PageMetadata]:
    """List pages with backlinks, optionally restricted to one folder."""
    if cache is not None:
        pages = cache.get_or_build(guard, build_index)
    else:
        pages = build_index(guard)

    if folder == JOURNALS_DIR:
        return [page for page in pages if page.is_journal]
    if folder == PAGES_DIR:
        return [page for page in pages if not page.is_journal]
    return pages
