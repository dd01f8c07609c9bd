"""Pydantic models for the Logseq graph."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Folder = Literal["pages", "journals"]
NodeType = Literal["page", "journal", "tag"]
EdgeType = Literal["link", "backlink", "tag"]


class PageMetadata(BaseModel):
    """Index entry for a page: everything except its content."""

    path: str  # Relative to the graph root, e.g. "pages/Goals.md"
    name: str  # Filename without the .md suffix
    tags: list[str] = Field(default_factory=list)  # First-seen order, unique
    links: list[str] = Field(default_factory=list)  # First-seen order, unique
    backlinks: list[str] = Field(default_factory=list)  # Names of pages linking here
    is_journal: bool = False


class Page(PageMetadata):
    """A fully read page."""

    content: str  # Body after the property block
    properties: dict[str, str] = Field(default_factory=dict)
    created_at: datetime | None = None
    modified_at: datetime | None = None


class SearchMatch(BaseModel):
    """A single matching line within a page."""

    line: int  # 1-based line number
    content: str  # The matching line, verbatim
    context: str  # Previous, matching and next line joined by newlines


class SearchResult(BaseModel):
    """A page that matched a search, with its line matches."""

    page: PageMetadata
    matches: list[SearchMatch] = Field(default_factory=list)


class GraphNode(BaseModel):
    """A node in a graph view."""

    id: str  # Page name, or "tag:<tag>" for tags
    name: str
    type: NodeType


class GraphEdge(BaseModel):
    """A typed, directed edge in a graph view."""

    source: str
    target: str
    type: EdgeType


class Graph(BaseModel):
    """Graph view built for a single request."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
