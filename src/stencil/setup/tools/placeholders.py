"""Placeholder substitution tool."""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path

from stencil.exceptions import PathEscapeError, SetupFailure
from stencil.setup.tools.paths import read_text, resolve_project_path

DEFAULT_SELECTOR = "**/*"


def apply_replacements(content: str, replacements: Mapping[str, str]) -> str:
    """Replace ``{{ TOKEN }}`` occurrences, tolerating inner whitespace."""
    result = content
    for token, replacement in replacements.items():
        pattern = re.compile(r"\{\{\s*" + re.escape(token) + r"\s*\}\}")
        result = pattern.sub(lambda _match: replacement, result)
    return result


def _validate_replacements(replacements: object) -> Mapping[str, str]:
    if not isinstance(replacements, Mapping):
        raise SetupFailure("Replacements must be provided as a mapping")
    for key, value in replacements.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise SetupFailure(f"Replacement value for {key!r} must be a string")
    return replacements


class PlaceholderTool:
    """Substitutes ``{{TOKEN}}`` markers in project files."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def replace_in_file(self, file: str, replacements: Mapping[str, str]) -> None:
        replacements = _validate_replacements(replacements)
        path = resolve_project_path(self._root, file, "file path")
        original = read_text(path, file, "Placeholder replace")
        updated = apply_replacements(original, replacements)
        if updated != original:
            path.write_text(updated, encoding="utf-8")

    def replace_all(
        self,
        replacements: Mapping[str, str],
        selector: str | list[str] = DEFAULT_SELECTOR,
    ) -> int:
        """Substitute markers in every UTF-8 file matching ``selector``; returns files changed."""
        replacements = _validate_replacements(replacements)
        patterns = [selector] if isinstance(selector, str) else list(selector)
        changed = 0
        for path in self._matching_files(patterns):
            try:
                original = path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                continue
            updated = apply_replacements(original, replacements)
            if updated != original:
                path.write_text(updated, encoding="utf-8")
                changed += 1
        return changed

    def _matching_files(self, patterns: list[str]) -> list[Path]:
        matches: set[Path] = set()
        for pattern in patterns:
            if not isinstance(pattern, str) or not pattern.strip():
                raise SetupFailure("Selectors must be non-empty glob strings")
            if Path(pattern).is_absolute() or ".." in Path(pattern).parts:
                raise PathEscapeError(f"Selector must stay within the project directory: {pattern}")
            for candidate in self._root.glob(pattern.strip()):
                if candidate.is_file() and not candidate.is_symlink():
                    matches.add(candidate)
        return sorted(matches)
