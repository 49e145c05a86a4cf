"""Tests for loading and running setup scripts."""

from __future__ import annotations

import sys
from pathlib import Path
from types import MappingProxyType

import pytest

from stencil.exceptions import SandboxViolation, SetupFailure, SetupTimeout
from stencil.setup import SetupContext, build_tools, run_setup


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "demo"
    root.mkdir()
    (root / "README.md").write_text("# demo\n", encoding="utf-8")
    return root


@pytest.fixture
def context(project: Path) -> SetupContext:
    return SetupContext(
        project_name="demo",
        project_dir=str(project),
        options=MappingProxyType({"features": ("auth", "docs"), "deployment": ("aws",)}),
        ide="vscode",
        inputs=MappingProxyType({"PROJECT_NAME": "demo"}),
    )


def _run(project: Path, context: SetupContext, source: str, *, timeout: float = 5.0):
    script = project / "_setup.py"
    script.write_text(source, encoding="utf-8")
    return run_setup(script, context, build_tools(project, context), timeout=timeout)


def test_successful_script_uses_tools(project: Path, context: SetupContext) -> None:
    source = (
        "def setup(env):\n"
        "    if env.tools.options.has('auth'):\n"
        "        env.tools.text.append_lines('README.md', ['Auth: ' + env.ctx.inputs['PROJECT_NAME']])\n"
        "    env.tools.ide.apply_preset(env.ctx.ide)\n"
    )

    result = _run(project, context, source)

    assert result.success is True
    assert result.error is None
    assert (project / "README.md").read_text(encoding="utf-8") == "# demo\nAuth: demo\n"
    assert (project / ".vscode" / "settings.json").is_file()


def test_import_is_rejected_before_any_tool_call(project: Path, context: SetupContext) -> None:
    source = (
        "def setup(env):\n"
        "    env.tools.text.append_lines('marker.txt', ['ran'])\n"
        "    import os\n"
    )

    result = _run(project, context, source)

    assert result.success is False
    assert isinstance(result.error, SandboxViolation)
    assert "Import is disabled" in (result.message or "")
    assert not (project / "marker.txt").exists()


def test_legacy_signature_is_rejected(project: Path, context: SetupContext) -> None:
    result = _run(project, context, "def setup(ctx, tools):\n    pass\n")

    assert result.success is False
    assert isinstance(result.error, SetupFailure)
    assert "def setup(env)" in str(result.error)
    assert "setup(ctx, tools)" in str(result.error)


def test_missing_entrypoint(project: Path, context: SetupContext) -> None:
    result = _run(project, context, "def configure(env):\n    pass\n")

    assert result.success is False
    assert "does not define setup()" in str(result.error)


def test_script_errors_keep_original_message(project: Path, context: SetupContext) -> None:
    result = _run(project, context, "def setup(env):\n    raise ValueError('boom')\n")

    assert result.success is False
    assert isinstance(result.error, SetupFailure)
    assert "ValueError: boom" in str(result.error)
    assert isinstance(result.error.__cause__, ValueError)


def test_context_is_read_only(project: Path, context: SetupContext) -> None:
    result = _run(project, context, "def setup(env):\n    env.ctx.project_name = 'other'\n")

    assert result.success is False
    assert "FrozenInstanceError" in str(result.error)


def test_unlisted_builtins_are_unavailable(project: Path, context: SetupContext) -> None:
    result = _run(project, context, "def setup(env):\n    type(env)\n")

    assert result.success is False
    assert "NameError" in str(result.error)


def test_tool_path_escape_is_reported(project: Path, context: SetupContext) -> None:
    result = _run(project, context, "def setup(env):\n    env.tools.text.append_lines('../outside.txt', ['x'])\n")

    assert result.success is False
    assert "within the project directory" in str(result.error)
    assert not (project.parent / "outside.txt").exists()


def test_runaway_script_times_out(project: Path, context: SetupContext) -> None:
    source = "def setup(env):\n    count = 0\n    while True:\n        count += 1\n"
    previous = sys.gettrace()

    result = _run(project, context, source, timeout=0.2)

    assert result.success is False
    assert isinstance(result.error, SetupTimeout)
    assert sys.gettrace() is previous


def test_timeout_swallowed_by_finally_is_still_reported(project: Path, context: SetupContext) -> None:
    source = (
        "def setup(env):\n"
        "    try:\n"
        "        count = 0\n"
        "        while True:\n"
        "            count += 1\n"
        "    finally:\n"
        "        return None\n"
    )

    result = _run(project, context, source, timeout=0.2)

    assert result.success is False
    assert isinstance(result.error, SetupTimeout)


def test_syntax_error_is_reported(project: Path, context: SetupContext) -> None:
    result = _run(project, context, "def setup(env)\n    pass\n")

    assert result.success is False
    assert "syntax error" in str(result.error)
