"""Tests for full and centered graph views."""

import pytest

from logseq_mcp.graph import build_graph, clamp_depth
from logseq_mcp.index import build_backlink_map
from logseq_mcp.models import PageMetadata


def _pages(*specs: tuple[str, list[str], list[str]], journals: tuple[str, ...] = ()):
    """Build indexed pages from (name, links, tags) with backlinks filled in."""
    pages = [
        PageMetadata(
            path=f"{'journals' if name in journals else 'pages'}/{name}.md",
            name=name,
            links=links,
            tags=tags,
            is_journal=name in journals,
        )
        for name, links, tags in specs
    ]
    backlinks = build_backlink_map(pages)
    return [p.model_copy(update={"backlinks": backlinks.get(p.name, [])}) for p in pages]


def _node_ids(graph):
    return {node.id for node in graph.nodes}


def _edges(graph):
    return {(edge.source, edge.target, edge.type) for edge in graph.edges}


class TestClampDepth:
    @pytest.mark.parametrize(
        "requested,expected",
        [(None, 1), (0, 0), (3, 3), (10, 10), (11, 10), (99, 10), (-5, 0)],
    )
    def test_clamp(self, requested, expected):
        assert clamp_depth(requested) == expected


class TestFullGraph:
    def test_pages_links_and_tags(self):
        pages = _pages(("Goals", [], ["work"]), ("Plan", ["Goals", "Later"], []))

        graph = build_graph(pages)

        assert _node_ids(graph) == {"Goals", "Plan", "Later", "tag:work"}
        assert _edges(graph) == {
            ("Plan", "Goals", "link"),
            ("Plan", "Later", "link"),
            ("Goals", "tag:work", "tag"),
        }

    def test_node_types(self):
        pages = _pages(
            ("Goals", [], ["work"]),
            ("2024_01_15", ["Goals"], []),
            journals=("2024_01_15",),
        )

        types = {node.id: node.type for node in build_graph(pages).nodes}

        assert types == {"Goals": "page", "2024_01_15": "journal", "tag:work": "tag"}

    def test_nodes_unique(self):
        pages = _pages(("A", ["C"], ["t"]), ("B", ["C"], ["t"]), ("C", [], []))
        graph = build_graph(pages)

        ids = [node.id for node in graph.nodes]
        assert len(ids) == len(set(ids))

    def test_empty(self):
        graph = build_graph([])
        assert graph.nodes == []
        assert graph.edges == []


class TestCenteredGraph:
    def test_depth_zero_is_center_and_tags_only(self):
        pages = _pages(("Goals", ["Vision"], ["work"]), ("Plan", ["Goals"], []), ("Vision", [], []))

        graph = build_graph(pages, center="Goals", depth=0)

        assert _node_ids(graph) == {"Goals", "tag:work"}
        assert _edges(graph) == {("Goals", "tag:work", "tag")}

    def test_default_depth_one(self):
        pages = _pages(
            ("Goals", ["Vision"], []),
            ("Plan", ["Goals"], []),
            ("Vision", ["Mission"], []),
            ("Mission", ["Legacy"], []),
            ("Legacy", [], []),
        )

        graph = build_graph(pages, center="Goals")

        # Level-1 pages still emit their own edges; they are just not expanded
        assert _node_ids(graph) == {"Goals", "Vision", "Plan", "Mission"}
        assert _edges(graph) == {
            ("Goals", "Vision", "link"),
            ("Plan", "Goals", "backlink"),
            ("Vision", "Mission", "link"),
            ("Goals", "Vision", "backlink"),
            ("Plan", "Goals", "link"),
        }

    def test_last_level_edges_without_expansion(self):
        pages = _pages(("Goals", ["Vision"], []), ("Vision", ["Mission"], []), ("Mission", ["End"], []))

        graph = build_graph(pages, center="Goals", depth=1)

        assert ("Vision", "Mission", "link") in _edges(graph)
        assert ("Mission", "End", "link") not in _edges(graph)
        assert "End" not in _node_ids(graph)

    def test_depth_two_reaches_further(self):
        pages = _pages(
            ("Goals", ["Vision"], []),
            ("Vision", ["Mission"], ["big"]),
            ("Mission", [], []),
        )

        graph = build_graph(pages, center="Goals", depth=2)

        assert {"Goals", "Vision", "Mission", "tag:big"} <= _node_ids(graph)
        assert ("Vision", "Mission", "link") in _edges(graph)

    def test_cycle_terminates(self):
        pages = _pages(("A", ["B"], []), ("B", ["A"], []))

        graph = build_graph(pages, center="A", depth=10)

        assert _node_ids(graph) == {"A", "B"}

    def test_missing_center_yields_empty_graph(self):
        pages = _pages(("A", [], []))
        graph = build_graph(pages, center="Nope", depth=3)
        assert graph.nodes == []
        assert graph.edges == []

    def test_link_to_unwritten_page_is_a_leaf(self):
        pages = _pages(("A", ["Ghost"], []))

        graph = build_graph(pages, center="A", depth=5)

        assert _node_ids(graph) == {"A", "Ghost"}
        assert {node.id: node.type for node in graph.nodes}["Ghost"] == "page"

    def test_depth_clamped(self):
        chain = [(f"P{i}", [f"P{i + 1}"], []) for i in range(15)] + [("P15", [], [])]
        pages = _pages(*chain)

        graph = build_graph(pages, center="P0", depth=50)

        # P10 sits on the last level: it links to P11 but P11 is never expanded
        assert "P10" in _node_ids(graph)
        assert "P11" in _node_ids(graph)
        assert "P12" not in _node_ids(graph)
