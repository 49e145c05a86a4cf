"""IDE preset tool."""

from __future__ import annotations

from pathlib import Path

from stencil.constants.ide import IDE_PRESETS
from stencil.exceptions import SetupFailure
from stencil.setup.tools.json_tools import JsonTool


class IdeTool:
    """Applies editor presets by deep-merging their JSON files into the project."""

    def __init__(self, root: Path, project_name: str) -> None:
        self._json = JsonTool(root)
        self._project_name = project_name

    @property
    def presets(self) -> tuple[str, ...]:
        return tuple(sorted(IDE_PRESETS))

    def apply_preset(self, name: str) -> list[str]:
        """Merge every file of preset ``name``; returns the files touched."""
        builder = IDE_PRESETS.get(name) if isinstance(name, str) else None
        if builder is None:
            raise SetupFailure(f"Unknown IDE preset: {name!r}. Available presets: {', '.join(self.presets)}")
        touched: list[str] = []
        for relative, payload in builder(self._project_name):
            self._json.merge(relative, payload)
            touched.append(relative)
        return touched
