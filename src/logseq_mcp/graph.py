"""Graph views over the page index.

Two modes:

- full graph: every page, every link target and every tag
- centered: breadth-first expansion from one page out to a bounded depth,
  following links and backlinks; tags are attached as leaves
"""

from __future__ import annotations

from collections import deque

from .config import DEFAULT_GRAPH_DEPTH, MAX_GRAPH_DEPTH
from .models import EdgeType, Graph, GraphEdge, GraphNode, NodeType, PageMetadata

TAG_PREFIX = "tag:"


def clamp_depth(depth: int | None) -> int:
    requested = DEFAULT_GRAPH_DEPTH if depth is None else depth
    return max(0, min(requested, MAX_GRAPH_DEPTH))


class GraphBuilder:
    """Accumulates unique nodes and typed edges for one request."""

    def __init__(self, pages: list[PageMetadata]) -> None:
        self.pages: dict[str, PageMetadata] = {}
        for page in pages:
            # pages/ is indexed before journals/, so a page wins a name clash
            self.pages.setdefault(page.name, page)
        self.nodes: dict[str, GraphNode] = {}
        self.edges: list[GraphEdge] = []

    def kind_of(self, name: str) -> NodeType:
        page = self.pages.get(name)
        return "journal" if page is not None and page.is_journal else "page"

    def add_node(self, node_id: str, name: str, node_type: NodeType) -> None:
        if node_id not in self.nodes:
            self.nodes[node_id] = GraphNode(id=node_id, name=name, type=node_type)

    def add_page_node(self, name: str) -> None:
        self.add_node(name, name, self.kind_of(name))

    def add_edge(self, source: str, target: str, edge_type: EdgeType) -> None:
        self.edges.append(GraphEdge(source=source, target=target, type=edge_type))

    def add_tags(self, page: PageMetadata) -> None:
        for tag in page.tags:
            tag_id = f"{TAG_PREFIX}{tag}"
            self.add_node(tag_id, tag, "tag")
            self.add_edge(page.name, tag_id, "tag")

    def build(self) -> Graph:
        return Graph(nodes=list(self.nodes.values()), edges=self.edges)


def build_full_graph(pages: list[PageMetadata]) -> Graph:
    builder = GraphBuilder(pages)

    for page in pages:
        builder.add_page_node(page.name)

        # Targets need not exist yet: links may point at pages to be written
        for link in page.links:
            builder.add_page_node(link)
            builder.add_edge(page.name, link, "link")

        builder.add_tags(page)

    return builder.build()


def build_centered_graph(
    pages: list[PageMetadata],
    center: str,
    depth: int | None = None,
) -> Graph:
    """Breadth-first expansion from center.

    Every visited page emits its link and backlink edges; neighbours are
    enqueued one level deeper only while the current level is below the
    clamped depth. Depth 0 yields the center and its tags alone. Names
    without a page are marked visited but emit nothing.
    """
    max_depth = clamp_depth(depth)
    builder = GraphBuilder(pages)
    visited: set[str] = set()
    queue: deque[tuple[str, int]] = deque([(center, 0)])

    while queue:
        name, level = queue.popleft()
        if name in visited or level > max_depth:
            continue
        visited.add(name)

        page = builder.pages.get(name)
        if page is None:
            continue

        builder.add_page_node(name)

        # Depth 0 is the center and its tags alone
        if max_depth > 0:
            enqueue = level < max_depth

            for link in page.links:
                builder.add_page_node(link)
                builder.add_edge(name, link, "link")
                if enqueue:
                    queue.append((link, level + 1))

            for source in page.backlinks:
                builder.add_page_node(source)
                builder.add_edge(source, name, "backlink")
                if enqueue:
                    queue.append((source, level + 1))

        builder.add_tags(page)

    return builder.build()


def build_graph(
    pages: list[PageMetadata],
    center: str | None = None,
    depth: int | None = None,
) -> Graph:
    if center:
        return build_centered_graph(pages, center, depth)
    return build_full_graph(pages)
