"""Tests for marker-based text edits."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from stencil.exceptions import PathEscapeError, SetupFailure
from stencil.setup.tools import TextTool


@pytest.fixture
def tool(tmp_path: Path) -> TextTool:
    return TextTool(tmp_path.resolve())


def _write(root: Path, name: str, content: str) -> Path:
    path = root / name
    path.write_text(content, encoding="utf-8")
    return path


def test_insert_after_places_block_on_its_own_line(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "notes.md", "a\nMARKER\nb\n")

    tool.insert_after("notes.md", "MARKER", "new")

    assert path.read_text(encoding="utf-8") == "a\nMARKER\nnew\nb\n"


def test_insert_after_marker_at_end_of_file(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "notes.md", "a\nMARKER")

    tool.insert_after("notes.md", "MARKER", ["one", "two"])

    assert path.read_text(encoding="utf-8") == "a\nMARKER\none\ntwo\n"


def test_insert_after_is_idempotent(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "notes.md", "a\nMARKER\nb\n")

    tool.insert_after("notes.md", "MARKER", "new")
    tool.insert_after("notes.md", "MARKER", "new")

    assert path.read_text(encoding="utf-8").count("new") == 1


def test_insert_after_missing_marker(tmp_path: Path, tool: TextTool) -> None:
    _write(tmp_path, "notes.md", "a\n")

    with pytest.raises(SetupFailure, match='Marker "MARKER" not found'):
        tool.insert_after("notes.md", "MARKER", "new")


def test_insert_after_missing_file(tool: TextTool) -> None:
    with pytest.raises(SetupFailure, match="target not found: absent.md"):
        tool.insert_after("absent.md", "MARKER", "new")


def test_ensure_block_skips_existing_content(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "notes.md", "MARKER\nalready here\n")

    tool.ensure_block("notes.md", "MARKER", "already here")

    assert path.read_text(encoding="utf-8") == "MARKER\nalready here\n"


def test_replace_between_keeps_markers(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "notes.md", "head\n<!-- start -->\nold\n<!-- end -->\ntail\n")

    tool.replace_between("notes.md", "<!-- start -->", "<!-- end -->", ["x", "y"])

    assert path.read_text(encoding="utf-8") == "head\n<!-- start -->\nx\ny\n<!-- end -->\ntail\n"


def test_replace_between_with_empty_block(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "notes.md", "<!-- start -->\nold\n<!-- end -->\n")

    tool.replace_between("notes.md", "<!-- start -->", "<!-- end -->", "")

    assert path.read_text(encoding="utf-8") == "<!-- start -->\n<!-- end -->\n"


def test_replace_between_missing_end_marker(tmp_path: Path, tool: TextTool) -> None:
    _write(tmp_path, "notes.md", "<!-- start -->\nold\n")

    with pytest.raises(SetupFailure, match="End marker"):
        tool.replace_between("notes.md", "<!-- start -->", "<!-- end -->", "x")


def test_append_lines_creates_file_and_parents(tmp_path: Path, tool: TextTool) -> None:
    tool.append_lines("docs/changelog.md", ["first", "second"])

    assert (tmp_path / "docs" / "changelog.md").read_text(encoding="utf-8") == "first\nsecond\n"


def test_append_lines_adds_missing_separator(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "notes.md", "existing")

    tool.append_lines("notes.md", "more")

    assert path.read_text(encoding="utf-8") == "existing\nmore\n"


def test_replace_literal_and_pattern(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "app.js", "const port = 3000;\nconst other = 3000;\n")

    assert tool.replace("app.js", "3000", "8080") == 2
    assert tool.replace("app.js", re.compile(r"const (\w+)"), "let x") == 2
    assert path.read_text(encoding="utf-8") == "let x = 8080;\nlet x = 8080;\n"


def test_replace_without_match(tmp_path: Path, tool: TextTool) -> None:
    path = _write(tmp_path, "app.js", "unchanged\n")

    assert tool.replace("app.js", "missing", "x") == 0
    assert path.read_text(encoding="utf-8") == "unchanged\n"
    with pytest.raises(SetupFailure, match="could not find a match"):
        tool.replace("app.js", "missing", "x", ensure_match=True)


def test_paths_outside_project_are_refused(tool: TextTool) -> None:
    with pytest.raises(PathEscapeError):
        tool.append_lines("../escape.txt", "x")
