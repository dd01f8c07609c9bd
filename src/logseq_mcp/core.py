"""Core business logic for logseq-mcp.

GraphService is the single entry point used by the MCP server and the CLI.

Design principles:
- All operations are async for consistency with the MCP layer
- The graph root is passed in explicitly; nothing here reads the environment
- Derived data (the index, backlinks) is rebuilt per call from disk
- Stray OSErrors and undecodable pages leave this module as GraphError subclasses
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable

from .backlinks_cache import BacklinkCache
from .errors import classify_os_errors
from .graph import build_graph
from .index import list_pages
from .models import Folder, Graph, Page, PageMetadata, SearchResult
from .safety import PathGuard
from .search import search_pages
from .store import PageStore
from .templates import article_block, book_block, exhibition_block, movie_block

log = logging.getLogger(__name__)


class GraphService:
    """Read, write, search and traverse a Logseq graph directory."""

    def __init__(
        self,
        root: str | Path,
        *,
        cache_backlinks: bool = False,
        allow_hardlinks: bool = False,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.guard = PathGuard(Path(root), allow_hardlinks=allow_hardlinks)
        self.cache = BacklinkCache() if cache_backlinks else None
        self.store = PageStore(self.guard, index=self._index, today=today)

    @property
    def root(self) -> Path:
        return self.guard.root

    def _index(self, folder: Folder | None = None) -> list[PageMetadata]:
        return list_pages(self.guard, folder=folder, cache=self.cache)

    # ─────────────────────────────────────────────────────────────────────
    # Pages
    # ─────────────────────────────────────────────────────────────────────

    async def list_pages(self, folder: Folder | None = None) -> list[PageMetadata]:
        """List all pages with tags, links and backlinks."""
        with classify_os_errors():
            return self._index(folder)

    async def read_page(self, path: str) -> Page:
        """Read a page by relative path ("pages/note.md") or name ("note")."""
        with classify_os_errors(path):
            return self.store.read(path)

    async def create_page(
        self,
        name: str,
        content: str,
        properties: dict[str, str] | None = None,
    ) -> Page:
        """Create a new page. Fails if a page with this name exists."""
        with classify_os_errors(name):
            return self.store.create(name, content, properties)

    async def update_page(
        self,
        path: str,
        content: str,
        properties: dict[str, str] | None = None,
    ) -> Page:
        """Replace a page's content (and property block)."""
        with classify_os_errors(path):
            return self.store.update(path, content, properties)

    async def delete_page(self, path: str) -> None:
        with classify_os_errors(path):
            self.store.delete(path)

    async def append_to_page(self, path: str, content: str) -> Page:
        """Append content on a new line at the end of a page."""
        with classify_os_errors(path):
            return self.store.append(path, content)

    # ─────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────

    async def search_pages(
        self,
        query: str,
        tags: list[str] | None = None,
        folder: Folder | None = None,
    ) -> list[SearchResult]:
        """Search page names and contents, optionally filtered by tags and folder."""
        with classify_os_errors():
            return search_pages(self.guard, self._index(folder), query, tags=tags)

    async def get_backlinks(self, path: str) -> list[PageMetadata]:
        """Pages whose links include the given page's name."""
        with classify_os_errors(path):
            file_path = self.store.resolve(path)
            self.guard.ensure_not_symlink(file_path)
            name = file_path.stem
            return [page for page in self._index() if name in page.links]

    async def get_graph(self, center: str | None = None, depth: int | None = None) -> Graph:
        """Full graph, or a neighbourhood of center up to depth (default 1, max 10)."""
        with classify_os_errors():
            return build_graph(self._index(), center=center, depth=depth)

    # ─────────────────────────────────────────────────────────────────────
    # Journals
    # ─────────────────────────────────────────────────────────────────────

    async def get_journal_page(self, date: str | None = None) -> Page | None:
        """Journal page for date (YYYY-MM-DD, default today), or None."""
        with classify_os_errors(date):
            return self.store.get_journal(date)

    async def create_journal_page(
        self,
        date: str | None = None,
        template: str | None = None,
    ) -> Page:
        """Create the journal page for date unless it exists; return it either way."""
        with classify_os_errors(date):
            return self.store.get_or_create_journal(date, template)

    async def append_to_journal_page(
        self,
        date: str | None = None,
        content: str | None = None,
    ) -> Page:
        with classify_os_errors(date):
            return self.store.append_to_journal(date, content)

    async def add_article(
        self,
        title: str,
        summary: str | None = None,
        tags: str | None = None,
        url: str | None = None,
        highlights: str | None = None,
        date: str | None = None,
    ) -> Page:
        """Record an article in the journal."""
        block = article_block(title, summary=summary, tags=tags, url=url, highlights=highlights)
        return await self.append_to_journal_page(date or None, block)

    async def add_book(
        self,
        title: str,
        author: str | None = None,
        tags: str | None = None,
        memo: str | None = None,
        date: str | None = None,
    ) -> Page:
        block = book_block(title, author=author, tags=tags, memo=memo)
        return await self.append_to_journal_page(date or None, block)

    async def add_movie(
        self,
        title: str,
        director: str | None = None,
        memo: str | None = None,
        date: str | None = None,
    ) -> Page:
        block = movie_block(title, director=director, memo=memo)
        return await self.append_to_journal_page(date or None, block)

    async def add_exhibition(
        self,
        title: str,
        venue: str | None = None,
        artist: str | None = None,
        memo: str | None = None,
        date: str | None = None,
    ) -> Page:
        block = exhibition_block(title, venue=venue, artist=artist, memo=memo)
        return await self.append_to_journal_page(date or None, block)
