"""Tests for JSON document edits."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from stencil.exceptions import SetupFailure
from stencil.setup.tools import JsonTool
from stencil.setup.tools.json_tools import deep_merge, parse_json_path


@pytest.fixture
def tool(tmp_path: Path) -> JsonTool:
    return JsonTool(tmp_path.resolve())


def _read(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.mark.parametrize(
    ("expression", "expected"),
    [
        ("name", ["name"]),
        ("a.b[0].c", ["a", "b", 0, "c"]),
        ("scripts.build", ["scripts", "build"]),
        ("matrix[1][2]", ["matrix", 1, 2]),
    ],
)
def test_parse_json_path(expression: str, expected: list[object]) -> None:
    assert parse_json_path(expression) == expected


@pytest.mark.parametrize("expression", ["", "[0].a", "a..b", "a[x]"])
def test_parse_json_path_rejects_malformed(expression: str) -> None:
    with pytest.raises(SetupFailure):
        parse_json_path(expression)


def test_deep_merge_merges_objects_and_replaces_arrays() -> None:
    base = {"a": {"x": 1, "list": [1]}, "keep": True}
    merged = deep_merge(base, {"a": {"y": 2, "list": [2]}})

    assert merged == {"a": {"x": 1, "y": 2, "list": [2]}, "keep": True}
    assert base == {"a": {"x": 1, "list": [1]}, "keep": True}


def test_set_creates_intermediate_containers(tmp_path: Path, tool: JsonTool) -> None:
    tool.set("config.json", "a.b[0].c", 1)

    assert _read(tmp_path / "config.json") == {"a": {"b": [{"c": 1}]}}


def test_write_uses_two_space_indent(tmp_path: Path, tool: JsonTool) -> None:
    tool.write("out.json", {"name": "demo"})

    assert (tmp_path / "out.json").read_text(encoding="utf-8") == '{\n  "name": "demo"\n}\n'


def test_merge_into_missing_file(tmp_path: Path, tool: JsonTool) -> None:
    tool.merge("package.json", {"scripts": {"start": "node index.js"}})
    tool.merge("package.json", {"scripts": {"test": "jest"}})

    assert _read(tmp_path / "package.json") == {"scripts": {"start": "node index.js", "test": "jest"}}


def test_remove_existing_and_missing_paths(tmp_path: Path, tool: JsonTool) -> None:
    tool.write("package.json", {"scripts": {"start": "x", "lint": "y"}, "list": [1, 2, 3]})

    tool.remove("package.json", "scripts.lint")
    tool.remove("package.json", "list[0]")
    tool.remove("package.json", "nothing.here")

    assert _read(tmp_path / "package.json") == {"scripts": {"start": "x"}, "list": [2, 3]}


def test_remove_requires_existing_file(tool: JsonTool) -> None:
    with pytest.raises(SetupFailure, match="JSON file not found"):
        tool.remove("absent.json", "a")


def test_add_to_array_spreads_lists_and_respects_unique(tmp_path: Path, tool: JsonTool) -> None:
    tool.add_to_array("package.json", "keywords", ["web", "api"])
    tool.add_to_array("package.json", "keywords", "web", unique=True)
    tool.add_to_array("package.json", "keywords", "cli", unique=True)

    assert _read(tmp_path / "package.json") == {"keywords": ["web", "api", "cli"]}


def test_add_to_array_rejects_non_array(tool: JsonTool) -> None:
    tool.write("package.json", {"keywords": "web"})

    with pytest.raises(SetupFailure, match="non-array"):
        tool.add_to_array("package.json", "keywords", "api")


def test_merge_array_upserts_by_key(tmp_path: Path, tool: JsonTool) -> None:
    tool.write(
        "launch.json",
        {"configurations": [{"name": "web", "port": 3000, "env": {"A": "1"}}]},
    )

    tool.merge_array(
        "launch.json",
        "configurations",
        [{"name": "web", "env": {"B": "2"}}, {"name": "worker"}],
        merge_key="name",
    )

    assert _read(tmp_path / "launch.json") == {
        "configurations": [
            {"name": "web", "port": 3000, "env": {"A": "1", "B": "2"}},
            {"name": "worker"},
        ]
    }


def test_merge_array_unique_without_key(tmp_path: Path, tool: JsonTool) -> None:
    tool.write("data.json", {"items": [1, 2]})

    tool.merge_array("data.json", "items", [2, 3], unique=True)

    assert _read(tmp_path / "data.json") == {"items": [1, 2, 3]}


def test_read_invalid_json(tmp_path: Path, tool: JsonTool) -> None:
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(SetupFailure, match="Failed to read JSON"):
        tool.read("broken.json")
