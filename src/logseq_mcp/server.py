"""FastMCP server for logseq-mcp.

This module provides MCP protocol wrappers around the core business logic.
All actual logic lives in core.py - this file handles input bounds,
serialization and error sanitization.
"""

import json
import logging
import sys
from typing import Annotated, Literal

from fastmcp import FastMCP
from fastmcp.exceptions import ResourceError, ToolError
from pydantic import Field

from .config import (
    MAX_CONTENT_SIZE,
    MAX_GRAPH_DEPTH,
    MAX_NAME_LENGTH,
    MAX_PATH_LENGTH,
    MAX_PROPERTY_VALUE_LENGTH,
    MAX_QUERY_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS_COUNT,
    ConfigurationError,
    backlink_cache_enabled,
    get_graph_root,
    hardlinks_allowed,
)
from .core import GraphService
from .errors import GraphError, sanitize_error_message
from .models import Graph, Page, PageMetadata, SearchResult

log = logging.getLogger(__name__)

mcp = FastMCP(
    name="logseq-mcp",
    instructions=(
        "Read and write a Logseq graph. Pages live in pages/, daily notes in journals/. "
        "Use [[Page]] for links and #tag for tags; backlinks are computed on every call."
    ),
)

JOURNAL_NOT_FOUND = "Journal page not found."

PagePath = Annotated[
    str,
    Field(max_length=MAX_PATH_LENGTH, description='Page path or name (e.g. "pages/note" or "note")'),
]
PageName = Annotated[str, Field(max_length=MAX_NAME_LENGTH, description="Page name")]
Content = Annotated[str, Field(max_length=MAX_CONTENT_SIZE)]
Properties = dict[str, Annotated[str, Field(max_length=MAX_PROPERTY_VALUE_LENGTH)]]
FolderFilter = Literal["pages", "journals"]
JournalDate = Annotated[
    str | None,
    Field(max_length=10, description="Date (YYYY-MM-DD, default: today)"),
]


# ─────────────────────────────────────────────────────────────────────────────
# Service lifecycle
# ─────────────────────────────────────────────────────────────────────────────

_service: GraphService | None = None


def get_service() -> GraphService:
    """Get the process-wide GraphService, creating it from the environment."""
    global _service
    if _service is None:
        _service = GraphService(
            get_graph_root(),
            cache_backlinks=backlink_cache_enabled(),
            allow_hardlinks=hardlinks_allowed(),
        )
    return _service


async def _run(coro):
    """Await a core call, converting failures into sanitized tool errors."""
    try:
        return await coro
    except GraphError as e:
        log.info("Request rejected: %s", e)
        raise ToolError(sanitize_error_message(e)) from e
    except Exception as e:
        log.exception("Unhandled error in tool call")
        raise ToolError(sanitize_error_message(e)) from e


# ─────────────────────────────────────────────────────────────────────────────
# MCP Tool Wrappers
# ─────────────────────────────────────────────────────────────────────────────


@mcp.tool(
    name="list_pages",
    description="List all pages in the graph with path, name, tags, links and backlinks.",
)
async def list_pages_tool(folder: FolderFilter | None = None) -> list[PageMetadata]:
    return await _run(get_service().list_pages(folder))


@mcp.tool(
    name="read_page",
    description="Read a page's content, properties and metadata.",
)
async def read_page_tool(path: PagePath) -> Page:
    return await _run(get_service().read_page(path))


@mcp.tool(
    name="create_page",
    description="Create a new page. Optional Logseq properties are written as key:: value lines.",
)
async def create_page_tool(
    name: PageName,
    content: Content,
    properties: Properties | None = None,
) -> Page:
    return await _run(get_service().create_page(name, content, properties))


@mcp.tool(
    name="update_page",
    description="Replace the content of an existing page.",
)
async def update_page_tool(
    path: PagePath,
    content: Content,
    properties: Properties | None = None,
) -> Page:
    return await _run(get_service().update_page(path, content, properties))


@mcp.tool(name="delete_page", description="Delete a page.")
async def delete_page_tool(path: PagePath) -> str:
    await _run(get_service().delete_page(path))
    return f"Page deleted: {path}"


@mcp.tool(
    name="append_to_page",
    description="Append content to the end of an existing page.",
)
async def append_to_page_tool(path: PagePath, content: Content) -> Page:
    return await _run(get_service().append_to_page(path, content))


@mcp.tool(
    name="search_pages",
    description="Search page titles and contents. Supports tag and folder filters.",
)
async def search_pages_tool(
    query: Annotated[str, Field(max_length=MAX_QUERY_LENGTH)],
    tags: Annotated[
        list[Annotated[str, Field(max_length=MAX_TAG_LENGTH)]] | None,
        Field(max_length=MAX_TAGS_COUNT),
    ] = None,
    folder: FolderFilter | None = None,
) -> list[SearchResult]:
    return await _run(get_service().search_pages(query, tags=tags, folder=folder))


@mcp.tool(
    name="get_backlinks",
    description="List all pages that link to a page.",
)
async def get_backlinks_tool(path: PagePath) -> list[PageMetadata]:
    return await _run(get_service().get_backlinks(path))


@mcp.tool(
    name="get_graph",
    description="Graph of pages, links, backlinks and tags; optionally centered on one page.",
)
async def get_graph_tool(
    center: Annotated[str | None, Field(max_length=MAX_NAME_LENGTH)] = None,
    depth: Annotated[int | None, Field(ge=0, le=MAX_GRAPH_DEPTH)] = None,
) -> Graph:
    return await _run(get_service().get_graph(center=center, depth=depth))


@mcp.tool(
    name="get_journal",
    description="Read today's journal page or the one for a given date.",
)
async def get_journal_tool(date: JournalDate = None) -> Page | str:
    page = await _run(get_service().get_journal_page(date))
    if page is None:
        return JOURNAL_NOT_FOUND
    return page


@mcp.tool(
    name="create_journal",
    description="Create today's journal page (or the one for a date) if it does not exist.",
)
async def create_journal_tool(
    date: JournalDate = None,
    template: Annotated[str | None, Field(max_length=MAX_CONTENT_SIZE)] = None,
) -> Page:
    return await _run(get_service().create_journal_page(date, template))


@mcp.tool(
    name="append_to_journal",
    description=(
        "Append content to a journal page, creating it if needed. "
        "Without content a new page gets an empty bullet."
    ),
)
async def append_to_journal_tool(
    content: Annotated[str | None, Field(max_length=MAX_CONTENT_SIZE)] = None,
    date: JournalDate = None,
) -> Page:
    return await _run(get_service().append_to_journal_page(date, content))


@mcp.tool(
    name="add_article",
    description="Record an article (conversation summary, web article, reading) in the journal.",
)
async def add_article_tool(
    title: Annotated[str, Field(max_length=500)],
    summary: Annotated[str | None, Field(max_length=2000)] = None,
    tags: Annotated[str | None, Field(max_length=500, description="Comma-separated")] = None,
    url: Annotated[str | None, Field(max_length=2000)] = None,
    highlights: Annotated[str | None, Field(max_length=10000)] = None,
    date: JournalDate = None,
) -> Page:
    return await _run(
        get_service().add_article(
            title, summary=summary, tags=tags, url=url, highlights=highlights, date=date
        )
    )


@mcp.tool(name="add_book", description="Record a book in the journal.")
async def add_book_tool(
    title: Annotated[str, Field(max_length=500)],
    author: Annotated[str | None, Field(max_length=200)] = None,
    tags: Annotated[str | None, Field(max_length=500, description="Comma-separated")] = None,
    memo: Annotated[str | None, Field(max_length=10000)] = None,
    date: JournalDate = None,
) -> Page:
    return await _run(get_service().add_book(title, author=author, tags=tags, memo=memo, date=date))


@mcp.tool(name="add_movie", description="Record a movie in the journal.")
async def add_movie_tool(
    title: Annotated[str, Field(max_length=500)],
    director: Annotated[str | None, Field(max_length=200)] = None,
    memo: Annotated[str | None, Field(max_length=10000)] = None,
    date: JournalDate = None,
) -> Page:
    return await _run(get_service().add_movie(title, director=director, memo=memo, date=date))


@mcp.tool(name="add_exhibition", description="Record an exhibition in the journal.")
async def add_exhibition_tool(
    title: Annotated[str, Field(max_length=500)],
    venue: Annotated[str | None, Field(max_length=200)] = None,
    artist: Annotated[str | None, Field(max_length=200)] = None,
    memo: Annotated[str | None, Field(max_length=10000)] = None,
    date: JournalDate = None,
) -> Page:
    return await _run(
        get_service().add_exhibition(title, venue=venue, artist=artist, memo=memo, date=date)
    )


# ─────────────────────────────────────────────────────────────────────────────
# Resources
# ─────────────────────────────────────────────────────────────────────────────


async def _page_body(path: str) -> str:
    try:
        page = await get_service().read_page(path)
    except Exception as e:
        raise ResourceError(sanitize_error_message(e)) from e
    return page.content


@mcp.resource("logseq://pages/{name}", mime_type="text/markdown")
async def page_resource(name: str) -> str:
    """Body of a regular page."""
    return await _page_body(f"pages/{name}")


@mcp.resource("logseq://journals/{name}", mime_type="text/markdown")
async def journal_resource(name: str) -> str:
    """Body of a journal page, e.g. logseq://journals/2024_01_15."""
    return await _page_body(f"journals/{name}")


def _resource_entry(page: PageMetadata) -> dict[str, str]:
    kind = "[Journal] " if page.is_journal else ""
    return {
        "uri": f"logseq://{page.path}",
        "name": page.name,
        "mimeType": "text/markdown",
        "description": f"{kind}Tags: {', '.join(page.tags) or 'none'}",
    }


@mcp.resource("logseq://index", mime_type="application/json")
async def page_index_resource() -> str:
    """Every page and journal as a readable logseq:// URI, with its tags."""
    try:
        pages = await get_service().list_pages()
    except Exception as e:
        raise ResourceError(sanitize_error_message(e)) from e
    return json.dumps([_resource_entry(page) for page in pages], ensure_ascii=False, indent=2)


def main(service: GraphService | None = None):
    """Run the MCP server over stdio."""
    global _service
    from ._logging import configure_logging

    configure_logging()

    if service is not None:
        _service = service

    try:
        service = get_service()
    except ConfigurationError as e:
        log.error("%s", e)
        sys.exit(1)
    log.info("Logseq MCP server started (stdio mode)")
    log.debug("Graph root: %s", service.root)

    mcp.run()


if __name__ == "__main__":
    main()
