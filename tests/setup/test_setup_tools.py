"""Tests for the placeholder, IDE, options and log tools."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType

import pytest

from stencil.exceptions import PathEscapeError, SetupFailure
from stencil.setup import SetupContext, build_tools
from stencil.setup.tools import OptionsTool, PlaceholderTool, apply_replacements, resolve_project_path


def test_apply_replacements_tolerates_whitespace() -> None:
    content = "{{PROJECT_NAME}} / {{ PROJECT_NAME }} / {{ AUTHOR}} / {{OTHER}}"

    result = apply_replacements(content, {"PROJECT_NAME": "demo", "AUTHOR": "Ada"})

    assert result == "demo / demo / Ada / {{OTHER}}"


def test_apply_replacements_does_not_expand_backreferences() -> None:
    assert apply_replacements("{{X}}", {"X": r"\1 $1"}) == r"\1 $1"


def test_replace_all_counts_changed_files_and_skips_binary(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    (root / "src").mkdir()
    (root / "README.md").write_text("# {{NAME}}\n", encoding="utf-8")
    (root / "src" / "index.js").write_text("// {{NAME}}\n", encoding="utf-8")
    (root / "src" / "plain.txt").write_text("nothing\n", encoding="utf-8")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe{{NAME}}")

    changed = PlaceholderTool(root).replace_all({"NAME": "demo"})

    assert changed == 2
    assert (root / "README.md").read_text(encoding="utf-8") == "# demo\n"
    assert (root / "src" / "index.js").read_text(encoding="utf-8") == "// demo\n"
    assert (root / "logo.png").read_bytes().endswith(b"{{NAME}}")


def test_replace_all_respects_selector(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    (root / "a.md").write_text("{{NAME}}", encoding="utf-8")
    (root / "b.txt").write_text("{{NAME}}", encoding="utf-8")

    changed = PlaceholderTool(root).replace_all({"NAME": "x"}, selector="*.md")

    assert changed == 1
    assert (root / "b.txt").read_text(encoding="utf-8") == "{{NAME}}"


@pytest.mark.parametrize("selector", ["../*", "/etc/*"])
def test_replace_all_refuses_escaping_selectors(tmp_path: Path, selector: str) -> None:
    with pytest.raises(PathEscapeError):
        PlaceholderTool(tmp_path.resolve()).replace_all({"NAME": "x"}, selector=selector)


def test_replace_in_file_requires_string_values(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    (root / "a.md").write_text("{{NAME}}", encoding="utf-8")

    with pytest.raises(SetupFailure, match="must be a string"):
        PlaceholderTool(root).replace_in_file("a.md", {"NAME": 3})


@pytest.mark.parametrize("relative", ["../x", "a/../../x", "/etc/passwd"])
def test_resolve_project_path_refuses_escape(tmp_path: Path, relative: str) -> None:
    with pytest.raises(PathEscapeError):
        resolve_project_path(tmp_path.resolve(), relative)


def test_resolve_project_path_allows_nested(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    assert resolve_project_path(root, "a/b/../c.txt") == root / "a" / "c.txt"


def test_ide_preset_merges_with_existing_settings(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    settings = root / ".vscode" / "settings.json"
    settings.parent.mkdir()
    settings.write_text(json.dumps({"editor.tabSize": 4}), encoding="utf-8")
    context = SetupContext(project_name="demo", project_dir=str(root))

    touched = build_tools(root, context).ide.apply_preset("vscode")

    assert ".vscode/settings.json" in touched
    merged = json.loads(settings.read_text(encoding="utf-8"))
    assert merged["editor.tabSize"] == 4
    assert merged["editor.formatOnSave"] is True
    launch = json.loads((root / ".vscode" / "launch.json").read_text(encoding="utf-8"))
    assert launch["configurations"][0]["name"] == "Launch demo"


def test_unknown_ide_preset(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    tools = build_tools(root, SetupContext(project_name="demo", project_dir=str(root)))

    assert "vscode" in tools.ide.presets
    with pytest.raises(SetupFailure, match="Unknown IDE preset"):
        tools.ide.apply_preset("emacs")


def test_options_tool_queries() -> None:
    options = OptionsTool(MappingProxyType({"deployment": ("aws",), "features": ("auth", "docs")}))
    calls: list[str] = []

    assert options.list() == ("aws", "auth", "docs")
    assert options.selected("features") == ("auth", "docs")
    assert options.selected("missing") == ()
    assert options.has("auth") is True
    assert options.has("deployment=aws") is True
    assert options.has("features=aws") is False
    assert options.when("docs", lambda: calls.append("docs")) is None
    assert options.when("gcp", lambda: calls.append("gcp")) is None
    assert calls == ["docs"]


def test_log_tool_writes_to_logger(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    root = tmp_path.resolve()
    tools = build_tools(root, SetupContext(project_name="demo", project_dir=str(root)))

    with caplog.at_level(logging.INFO, logger="stencil.setup.script"):
        tools.log.info("configured", {"files": 2})
        tools.log.warn("careful")

    messages = [record.getMessage() for record in caplog.records]
    assert any("configured" in message and '"files": 2' in message for message in messages)
    assert any("careful" in message for message in messages)
