"""Capability-scoped tools handed to setup scripts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from stencil.setup.context import SetupContext
from stencil.setup.tools.ide import IdeTool
from stencil.setup.tools.json_tools import JsonTool
from stencil.setup.tools.log import LogTool
from stencil.setup.tools.options import OptionsTool
from stencil.setup.tools.paths import resolve_project_path
from stencil.setup.tools.placeholders import PlaceholderTool, apply_replacements
from stencil.setup.tools.text import TextTool


@dataclass(frozen=True)
class SetupTools:
    placeholders: PlaceholderTool
    ide: IdeTool
    text: TextTool
    json: JsonTool
    options: OptionsTool
    log: LogTool


def build_tools(root: Path, context: SetupContext) -> SetupTools:
    """Build the tool surface for a project rooted at ``root``."""
    root = root.resolve()
    return SetupTools(
        placeholders=PlaceholderTool(root),
        ide=IdeTool(root, context.project_name),
        text=TextTool(root),
        json=JsonTool(root),
        options=OptionsTool(context.options),
        log=LogTool(),
    )


__all__ = [
    "IdeTool",
    "JsonTool",
    "LogTool",
    "OptionsTool",
    "PlaceholderTool",
    "SetupTools",
    "TextTool",
    "apply_replacements",
    "build_tools",
    "resolve_project_path",
]
