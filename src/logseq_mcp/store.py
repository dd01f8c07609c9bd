"""Page and journal storage on disk.

Each page is a single Markdown file. Every operation resolves its target
through the PathGuard and refuses symbolic links before touching the file.
Mutations touch exactly one file.
"""

from __future__ import annotations

import logging
import os
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Callable, Iterator, Mapping

from .config import (
    DEFAULT_JOURNAL_STUB,
    JOURNALS_DIR,
    PAGE_SUFFIX,
    PAGES_DIR,
)
from .errors import AlreadyExists, InvalidName, NotFound
from .models import Page, PageMetadata
from .parser import build_content, extract_links, extract_tags, split_properties
from .safety import PathGuard
from .validation import (
    journal_filename,
    validate_content_size,
    validate_journal_date,
    validate_page_name,
)

log = logging.getLogger(__name__)

_NOFOLLOW = getattr(os, "O_NOFOLLOW", 0)


def write_text(path: Path, text: str, exclusive: bool = False) -> None:
    """Write text to path without following a symlink at the final component.

    With exclusive=True the file must not exist yet (O_EXCL); a concurrent
    creator loses with FileExistsError.
    """
    flags = os.O_WRONLY | os.O_CREAT | _NOFOLLOW
    flags |= os.O_EXCL if exclusive else os.O_TRUNC
    fd = os.open(path, flags, 0o644)
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def _ensure_md_suffix(path: str) -> str:
    if path.endswith(PAGE_SUFFIX):
        return path
    return f"{path}{PAGE_SUFFIX}"


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=UTC)


class PageStore:
    """CRUD operations for pages and journals under a graph root."""

    def __init__(
        self,
        guard: PathGuard,
        index: Callable[[], list[PageMetadata]],
        today: Callable[[], date] = date.today,
    ) -> None:
        self.guard = guard
        self.index = index
        self.today = today

    # ─────────────────────────────────────────────────────────────────────
    # Resolution
    # ─────────────────────────────────────────────────────────────────────

    def candidate_paths(self, path_or_name: str) -> Iterator[str]:
        """Yield candidate paths (relative to the root) in priority order.

        1. An explicit relative path, if the argument contains a separator
        2. pages/<name>.md
        3. journals/<name with - replaced by _>.md
        4. journals/<name>.md
        """
        if "/" in path_or_name:
            yield _ensure_md_suffix(path_or_name)
            return

        yield f"{PAGES_DIR}/{path_or_name}{PAGE_SUFFIX}"
        yield f"{JOURNALS_DIR}/{journal_filename(path_or_name)}"
        yield f"{JOURNALS_DIR}/{path_or_name}{PAGE_SUFFIX}"

    def resolve(self, path_or_name: str) -> Path:
        """Resolve a page path or name to an absolute path inside the root.

        The first candidate that stays inside the root and exists wins.

        Raises:
            InvalidName: If the argument contains a NUL byte.
            PathEscape: If a candidate points outside the graph root.
            NotFound: If no candidate exists.
        """
        if "\x00" in path_or_name:
            raise InvalidName("Invalid page name: contains forbidden characters")

        for candidate in self.candidate_paths(path_or_name):
            file_path = self.guard.resolve(candidate)
            # lexists: a symlink counts as found so that it is rejected, not skipped
            if os.path.lexists(file_path):
                return file_path

        raise NotFound(f"Page not found: {path_or_name}")

    def _folder(self, folder_name: str) -> Path:
        """Resolve a top-level folder, creating it on first write."""
        folder = self.guard.resolve(folder_name)
        self.guard.ensure_not_symlink(folder)
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    # ─────────────────────────────────────────────────────────────────────
    # Pages
    # ─────────────────────────────────────────────────────────────────────

    def load(self, file_path: Path) -> Page:
        """Parse a resolved page file, computing backlinks from a fresh index."""
        self.guard.ensure_not_symlink(file_path)
        raw = file_path.read_text(encoding="utf-8")
        st = file_path.stat()

        name = file_path.name
        if name.endswith(PAGE_SUFFIX):
            name = name[: -len(PAGE_SUFFIX)]

        relative = self.guard.relative(file_path)
        properties, body = split_properties(raw)
        backlinks = [page.name for page in self.index() if name in page.links]

        return Page(
            path=relative,
            name=name,
            content=body,
            properties=properties,
            tags=extract_tags(raw),
            links=extract_links(raw),
            backlinks=backlinks,
            is_journal=relative.startswith(f"{JOURNALS_DIR}/"),
            created_at=_timestamp(getattr(st, "st_birthtime", st.st_ctime)),
            modified_at=_timestamp(st.st_mtime),
        )

    def read(self, path_or_name: str) -> Page:
        return self.load(self.resolve(path_or_name))

    def create(
        self,
        name: str,
        content: str,
        properties: Mapping[str, object] | None = None,
    ) -> Page:
        """Create pages/<name>.md, failing if it already exists."""
        validate_page_name(name)
        validate_content_size(content)
        full_content = build_content(content, properties)
        validate_content_size(full_content)

        file_path = self.guard.resolve(f"{PAGES_DIR}/{name}{PAGE_SUFFIX}")
        self._folder(PAGES_DIR)
        self.guard.ensure_not_symlink(file_path)

        try:
            write_text(file_path, full_content, exclusive=True)
        except FileExistsError as e:
            raise AlreadyExists(f"Page already exists: {name}") from e

        log.info("Created page %s", name)
        return self.load(file_path)

    def update(
        self,
        path_or_name: str,
        content: str,
        properties: Mapping[str, object] | None = None,
    ) -> Page:
        """Replace a page's content entirely."""
        validate_content_size(content)
        full_content = build_content(content, properties)
        validate_content_size(full_content)

        file_path = self.resolve(path_or_name)
        self.guard.ensure_not_symlink(file_path)
        write_text(file_path, full_content)
        return self.load(file_path)

    def append(self, path_or_name: str, content: str) -> Page:
        validate_content_size(content)

        file_path = self.resolve(path_or_name)
        self.guard.ensure_not_symlink(file_path)
        existing = file_path.read_text(encoding="utf-8")
        new_content = existing.rstrip() + "\n" + content

        validate_content_size(new_content)
        write_text(file_path, new_content)
        return self.load(file_path)

    def delete(self, path_or_name: str) -> None:
        file_path = self.resolve(path_or_name)
        self.guard.ensure_not_symlink(file_path)
        file_path.unlink()
        log.info("Deleted page %s", self.guard.relative(file_path))

    # ─────────────────────────────────────────────────────────────────────
    # Journals
    # ─────────────────────────────────────────────────────────────────────

    def journal_path(self, date_str: str | None = None) -> Path:
        """Absolute path of the journal file for date_str (default: today)."""
        if date_str:
            validate_journal_date(date_str)
        target = date_str or self.today().isoformat()
        return self.guard.resolve(f"{JOURNALS_DIR}/{journal_filename(target)}")

    def get_journal(self, date_str: str | None = None) -> Page | None:
        file_path = self.journal_path(date_str)
        if not os.path.lexists(file_path):
            return None
        return self.load(file_path)

    def get_or_create_journal(
        self,
        date_str: str | None = None,
        template: str | None = None,
    ) -> Page:
        """Return the journal for a date, creating it from template if absent."""
        file_path = self.journal_path(date_str)
        if template:
            validate_content_size(template)

        self._folder(JOURNALS_DIR)
        self.guard.ensure_not_symlink(file_path)

        try:
            write_text(file_path, template or DEFAULT_JOURNAL_STUB, exclusive=True)
            log.info("Created journal %s", file_path.name)
        except FileExistsError:
            pass

        return self.load(file_path)

    def append_to_journal(
        self,
        date_str: str | None = None,
        content: str | None = None,
    ) -> Page:
        """Append to a journal, seeding a new one if it does not exist."""
        file_path = self.journal_path(date_str)
        if content:
            validate_content_size(content)

        self._folder(JOURNALS_DIR)
        self.guard.ensure_not_symlink(file_path)

        try:
            existing = file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            existing = ""

        if existing:
            new_content = existing + "\n" + (content or "")
        else:
            new_content = content or DEFAULT_JOURNAL_STUB

        validate_content_size(new_content)
        write_text(file_path, new_content)
        return self.load(file_path)
