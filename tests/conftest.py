"""Shared test fixtures for the logseq-mcp test suite.

Design:
- graph_root: isolated graph directory (pages/ and journals/) under tmp_path
- service: GraphService on graph_root with a fixed "today"
- runner / cli_invoke: CliRunner pointed at graph_root
- Async tests use pytest-asyncio with function scope
"""

import logging
from datetime import date
from pathlib import Path

import pytest
from click.testing import CliRunner

from logseq_mcp.cli import cli
from logseq_mcp.core import GraphService

FIXED_TODAY = date(2024, 1, 15)


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def graph_root(tmp_path: Path, monkeypatch) -> Path:
    """Create an empty graph with pages/ and journals/ folders.

    Sets LOGSEQ_GRAPH_PATH so that environment-driven code paths find it.
    """
    root = tmp_path / "graph"
    (root / "pages").mkdir(parents=True)
    (root / "journals").mkdir()
    monkeypatch.setenv("LOGSEQ_GRAPH_PATH", str(root))
    monkeypatch.delenv("LOGSEQ_BACKLINK_CACHE", raising=False)
    monkeypatch.delenv("LOGSEQ_ALLOW_HARDLINKS", raising=False)
    return root


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging() after each test.

    Its handler is bound to a CliRunner's (since closed) stderr, and a logger
    left with propagate=False gets pytest's capture handlers attached directly.
    """
    yield
    logger = logging.getLogger("logseq_mcp")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def service(graph_root: Path) -> GraphService:
    """GraphService whose "today" is always 2024-01-15."""
    return GraphService(graph_root, today=lambda: FIXED_TODAY)


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def cli_invoke(runner: CliRunner, graph_root: Path):
    """Helper for invoking the CLI against graph_root.

    Usage:
        def test_list(cli_invoke):
            result = cli_invoke(["list"])
            assert result.exit_code == 0
    """

    def _invoke(args: list[str], input: str | None = None):
        return runner.invoke(
            cli,
            ["--graph", str(graph_root), *args],
            input=input,
            catch_exceptions=False,
        )

    return _invoke


# ─────────────────────────────────────────────────────────────────────────────
# Async Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def anyio_backend():
    """Use asyncio for async tests."""
    return "asyncio"


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def write_page(root: Path, name: str, content: str) -> Path:
    """Write pages/<name>.md directly, bypassing the service.

    Usage in tests:
        from conftest import write_page
        write_page(graph_root, "Goals", "- ship it")
    """
    path = root / "pages" / f"{name}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_journal(root: Path, day: str, content: str) -> Path:
    """Write journals/<YYYY_MM_DD>.md for a YYYY-MM-DD date."""
    path = root / "journals" / f"{day.replace('-', '_')}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
