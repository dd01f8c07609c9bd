"""CLI tests for lsq.

Covers every command with one happy path, plus the common error paths:
missing configuration, sanitized errors and bad --prop syntax.

Design:
- Uses fixtures from conftest.py (graph_root, cli_invoke, runner)
- Tests BEHAVIORS not implementations
"""

import json

import pytest

from conftest import write_journal, write_page
from logseq_mcp import __version__ as LOGSEQ_MCP_VERSION
from logseq_mcp.cli import cli

ALL_COMMANDS = [
    "list",
    "get",
    "create",
    "update",
    "append",
    "delete",
    "search",
    "backlinks",
    "graph",
    "journal",
    "journal-append",
    "serve",
]


class TestGlobal:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert LOGSEQ_MCP_VERSION in result.output

    @pytest.mark.parametrize("command", ALL_COMMANDS)
    def test_help(self, runner, command):
        result = runner.invoke(cli, [command, "--help"])
        assert result.exit_code == 0
        assert "Usage:" in result.output

    def test_missing_graph_root(self, runner, monkeypatch):
        monkeypatch.delenv("LOGSEQ_GRAPH_PATH", raising=False)

        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 2
        assert "LOGSEQ_GRAPH_PATH" in result.output

    def test_graph_root_from_environment(self, runner, graph_root):
        write_page(graph_root, "Goals", "- g")

        result = runner.invoke(cli, ["list"], env={"LOGSEQ_GRAPH_PATH": str(graph_root)})

        assert result.exit_code == 0
        assert "[P] Goals" in result.output


class TestPageCommands:
    def test_create_and_get(self, cli_invoke, graph_root):
        result = cli_invoke(["create", "Goals", "--content", "- ship #work", "--prop", "status=active"])
        assert result.exit_code == 0
        assert "Created: pages/Goals.md" in result.output

        result = cli_invoke(["get", "Goals"])
        assert result.exit_code == 0
        assert "# Goals  (pages/Goals.md)" in result.output
        assert "status:: active" in result.output
        assert "- ship #work" in result.output

    def test_get_json(self, cli_invoke, graph_root):
        write_page(graph_root, "Goals", "- g")

        result = cli_invoke(["get", "Goals", "--json"])

        data = json.loads(result.output)
        assert data["path"] == "pages/Goals.md"
        assert data["content"] == "- g"

    def test_create_duplicate_fails(self, cli_invoke, graph_root):
        write_page(graph_root, "Goals", "- g")

        result = cli_invoke(["create", "Goals", "--content", "- again"])

        assert result.exit_code == 1
        assert "Error: Page already exists: Goals" in result.output

    def test_bad_prop_syntax(self, cli_invoke):
        result = cli_invoke(["create", "Goals", "--content", "- g", "--prop", "novalue"])

        assert result.exit_code == 2
        assert "key=value" in result.output

    def test_update_and_append(self, cli_invoke, graph_root):
        write_page(graph_root, "Log", "- one")

        assert cli_invoke(["update", "Log", "--content", "- two"]).exit_code == 0
        result = cli_invoke(["append", "Log", "--content", "- three"])

        assert "Appended to: pages/Log.md" in result.output
        assert (graph_root / "pages" / "Log.md").read_text() == "- two\n- three"

    def test_delete(self, cli_invoke, graph_root):
        write_page(graph_root, "Temp", "- t")

        result = cli_invoke(["delete", "Temp"])

        assert result.exit_code == 0
        assert "Deleted: Temp" in result.output
        assert not (graph_root / "pages" / "Temp.md").exists()

    def test_get_traversal_is_sanitized(self, cli_invoke):
        result = cli_invoke(["get", "../../etc/passwd"])

        assert result.exit_code == 1
        assert "Error: Access denied: path outside graph directory" in result.output

    def test_list_folder_filter(self, cli_invoke, graph_root):
        write_page(graph_root, "Goals", "- g")
        write_journal(graph_root, "2024-01-15", "- [[Goals]] #daily")

        result = cli_invoke(["list", "--folder", "journals"])

        assert "[J] 2024_01_15  (tags: daily)" in result.output
        assert "Goals" not in result.output


class TestQueryCommands:
    def test_search(self, cli_invoke, graph_root):
        write_page(graph_root, "Tasks", "- buy milk\n- TODO report")

        result = cli_invoke(["search", "todo"])

        assert result.exit_code == 0
        assert "pages/Tasks.md" in result.output
        assert "  2: - TODO report" in result.output

    def test_search_no_results(self, cli_invoke):
        result = cli_invoke(["search", "nothing"])
        assert "No results found." in result.output

    def test_backlinks(self, cli_invoke, graph_root):
        write_page(graph_root, "Goals", "- g")
        write_page(graph_root, "Plan", "- [[Goals]]")

        result = cli_invoke(["backlinks", "Goals"])

        assert "[P] Plan" in result.output

    def test_graph(self, cli_invoke, graph_root):
        write_page(graph_root, "Goals", "- #work")
        write_page(graph_root, "Plan", "- [[Goals]]")

        result = cli_invoke(["graph", "--center", "Goals", "--depth", "1"])

        assert "3 nodes, 3 edges" in result.output
        assert "Plan -[backlink]-> Goals" in result.output

    def test_graph_json(self, cli_invoke, graph_root):
        write_page(graph_root, "A", "- [[B]]")

        data = json.loads(cli_invoke(["graph", "--json"]).output)

        assert {n["id"] for n in data["nodes"]} == {"A", "B"}
        assert data["edges"] == [{"source": "A", "target": "B", "type": "link"}]


class TestJournalCommands:
    def test_journal_missing(self, cli_invoke):
        result = cli_invoke(["journal", "--date", "2024-01-01"])

        assert result.exit_code == 1
        assert "Journal page not found." in result.output

    def test_journal_create(self, cli_invoke, graph_root):
        result = cli_invoke(["journal", "--date", "2024-01-01", "--create", "--template", "- start"])

        assert result.exit_code == 0
        assert (graph_root / "journals" / "2024_01_01.md").read_text() == "- start"

    def test_journal_append(self, cli_invoke, graph_root):
        write_journal(graph_root, "2024-01-01", "- start")

        result = cli_invoke(["journal-append", "--date", "2024-01-01", "--content", "- more"])

        assert result.exit_code == 0
        assert (graph_root / "journals" / "2024_01_01.md").read_text() == "- start\n- more"

    def test_journal_bad_date(self, cli_invoke):
        result = cli_invoke(["journal", "--date", "01-01-2024"])

        assert result.exit_code == 1
        assert "Invalid date format" in result.output
