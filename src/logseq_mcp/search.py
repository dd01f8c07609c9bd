"""Line-oriented full-text search over indexed pages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from .errors import GraphError
from .models import PageMetadata, SearchMatch, SearchResult
from .validation import validate_query

if TYPE_CHECKING:
    from .safety import PathGuard

log = logging.getLogger(__name__)


def find_line_matches(content: str, query: str) -> list[SearchMatch]:
    """Case-insensitive substring match per line, with one line of context each side."""
    query_lower = query.lower()
    lines = content.split("\n")
    matches: list[SearchMatch] = []

    for i, line in enumerate(lines):
        if query_lower in line.lower():
            matches.append(
                SearchMatch(
                    line=i + 1,
                    content=line,
                    context="\n".join(lines[max(0, i - 1) : i + 2]),
                )
            )

    return matches


def search_pages(
    guard: PathGuard,
    pages: Iterable[PageMetadata],
    query: str,
    tags: list[str] | None = None,
) -> list[SearchResult]:
    """Search page contents and names.

    Pages that are no longer safe to read (symlinked, hard-linked, replaced by
    a directory, or removed) are skipped so one bad file cannot fail the
    whole search.

    Args:
        guard: Path guard for the graph root.
        pages: Candidate pages, usually already filtered by folder.
        query: Substring to look for, case-insensitive.
        tags: If given, only pages carrying at least one of these tags.

    Returns:
        Pages whose name contains the query or that have at least one
        matching line, in index order.
    """
    validate_query(query)

    query_lower = query.lower()
    results: list[SearchResult] = []

    for page in pages:
        if tags and not any(tag in page.tags for tag in tags):
            continue

        try:
            file_path = guard.resolve(page.path)
            guard.ensure_regular_single_link(file_path)
            content = file_path.read_text(encoding="utf-8")
        except (GraphError, OSError, UnicodeDecodeError) as e:
            log.debug("Skipping %s during search: %s", page.path, e)
            continue

        matches = find_line_matches(content, query)

        if query_lower in page.name.lower() or matches:
            results.append(SearchResult(page=page, matches=matches))

    return results
