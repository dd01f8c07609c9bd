"""Tests for PathGuard: root confinement, symlink and hardlink refusal."""

import os
from pathlib import Path

import pytest

from logseq_mcp.errors import LinkAttack, PathEscape
from logseq_mcp.safety import PathGuard


@pytest.fixture
def guard(graph_root: Path) -> PathGuard:
    return PathGuard(graph_root)


class TestResolve:
    def test_relative_path_inside_root(self, guard, graph_root):
        resolved = guard.resolve("pages/note.md")
        assert resolved == Path(os.path.realpath(graph_root)) / "pages" / "note.md"

    @pytest.mark.parametrize(
        "candidate",
        ["../outside.md", "pages/../../outside.md", "/etc/passwd"],
    )
    def test_rejects_escape(self, guard, candidate):
        with pytest.raises(PathEscape, match="Access denied"):
            guard.resolve(candidate)

    def test_sibling_with_common_prefix_is_outside(self, guard, graph_root):
        sibling = graph_root.parent / (graph_root.name + "-evil")
        sibling.mkdir()
        with pytest.raises(PathEscape):
            guard.resolve(str(sibling / "x.md"))

    def test_rejects_symlinked_directory_leading_outside(self, guard, graph_root, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (graph_root / "pages" / "escape").symlink_to(outside, target_is_directory=True)

        with pytest.raises(PathEscape):
            guard.resolve("pages/escape/secret.md")

    def test_relative_is_posix(self, guard):
        assert guard.relative(guard.resolve("journals/2024_01_15.md")) == "journals/2024_01_15.md"


class TestLinkChecks:
    def test_symlink_rejected(self, guard, graph_root, tmp_path):
        target = tmp_path / "secret.txt"
        target.write_text("secret")
        link = graph_root / "pages" / "link.md"
        link.symlink_to(target)

        with pytest.raises(LinkAttack, match="symbolic links"):
            guard.ensure_not_symlink(link)
        with pytest.raises(LinkAttack, match="symbolic links"):
            guard.ensure_regular_single_link(link)

    def test_missing_entry_is_not_a_symlink(self, guard, graph_root):
        guard.ensure_not_symlink(graph_root / "pages" / "missing.md")

    def test_directory_is_not_regular(self, guard, graph_root):
        (graph_root / "pages" / "dir.md").mkdir()
        with pytest.raises(LinkAttack, match="not a regular file"):
            guard.ensure_regular_single_link(graph_root / "pages" / "dir.md")

    def test_hardlink_rejected_by_default(self, guard, graph_root, tmp_path):
        original = tmp_path / "planted.md"
        original.write_text("- planted")
        linked = graph_root / "pages" / "planted.md"
        os.link(original, linked)

        with pytest.raises(LinkAttack, match="hardlinks"):
            guard.ensure_regular_single_link(linked)

    def test_hardlink_allowed_when_configured(self, graph_root, tmp_path):
        original = tmp_path / "planted.md"
        original.write_text("- planted")
        linked = graph_root / "pages" / "planted.md"
        os.link(original, linked)

        PathGuard(graph_root, allow_hardlinks=True).ensure_regular_single_link(linked)

    def test_plain_file_passes(self, guard, graph_root):
        path = graph_root / "pages" / "plain.md"
        path.write_text("- ok")
        guard.ensure_regular_single_link(path)
