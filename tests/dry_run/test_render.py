"""Tests for dry-run plan rendering."""

from __future__ import annotations

from pathlib import Path

from stencil.dry_run import DirectoryCreate, FileCopy, SetupScript, build_plan, render
from stencil.manifest import load_manifest
from stencil.placeholders import ReportEntry


class _BrokenRepr:
    def __repr__(self) -> str:
        raise RuntimeError("no repr")


def _count_line(output: str, label: str) -> str:
    return next(line for line in output.splitlines() if line.strip().startswith(label))


def test_render_plan_lists_operations_and_counts(template_repo: Path, tmp_path: Path) -> None:
    template_dir = template_repo / "webapp"
    plan = build_plan(
        template_dir,
        tmp_path / "out",
        load_manifest(template_dir),
        placeholders=[
            ReportEntry(token="PROJECT_NAME", source="flag", display_value="out"),
            ReportEntry(token="API_KEY", source="environment", display_value="******"),
        ],
        warnings=["Unknown value for deployment: heroku"],
    )

    output = render(plan)

    assert "Dry run: no files will be written" in output
    assert f"Target      {(tmp_path / 'out').resolve()}" in output
    assert _count_line(output, "Directories to create").split()[-1] == "1"
    assert _count_line(output, "Files to copy").split()[-1] == "3"
    assert _count_line(output, "Setup scripts to run").split()[-1] == "1"
    assert "mkdir  src/" in output
    assert "copy   src/index.js" in output
    assert "setup  _setup.py" in output
    assert "PROJECT_NAME = out (flag)" in output
    assert "API_KEY = ****** (environment)" in output
    assert "warning: Unknown value for deployment: heroku" in output
    assert "Unrecognized entries" not in output
    assert "\033[" not in output


def test_render_with_color(template_repo: Path, tmp_path: Path) -> None:
    template_dir = template_repo / "webapp"
    plan = build_plan(template_dir, tmp_path / "out", load_manifest(template_dir))

    assert "\033[1m" in render(plan, color=True)


def test_render_bare_operation_list_with_unknown_entries(tmp_path: Path) -> None:
    operations = [
        DirectoryCreate(relative="src", path=tmp_path / "src"),
        FileCopy(relative="a.txt", source=tmp_path / "a", destination=tmp_path / "b"),
        {"kind": "symlink"},
        _BrokenRepr(),
    ]

    output = render(operations)

    assert "mkdir  src/" in output
    assert "copy   a.txt" in output
    assert "Unknown operation: {'kind': 'symlink'}" in output
    assert "Unknown operation: <_BrokenRepr>" in output
    assert _count_line(output, "Unrecognized entries").split()[-1] == "2"
    assert "Target" not in output


def test_render_non_iterable_input() -> None:
    output = render(42)

    assert "Unknown operation: 42" in output
    assert _count_line(output, "Unrecognized entries").split()[-1] == "1"


def test_render_empty_plan() -> None:
    output = render([])

    assert _count_line(output, "Files to copy").split()[-1] == "0"
    assert _count_line(output, "Setup scripts to run").split()[-1] == "0"


def test_render_setup_operation(tmp_path: Path) -> None:
    output = render([SetupScript(relative="_setup.py", source=tmp_path / "s", path=tmp_path / "t")])

    assert "setup  _setup.py" in output
