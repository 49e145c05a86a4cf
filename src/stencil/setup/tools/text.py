"""Marker-based text editing tool."""

from __future__ import annotations

import re
from pathlib import Path

from stencil.exceptions import SetupFailure
from stencil.setup.tools.paths import normalize_text_input, read_text, resolve_project_path


def _with_trailing_newline(text: str) -> str:
    return text if text.endswith("\n") else f"{text}\n"


def _with_leading_newline(text: str) -> str:
    return text if text.startswith("\n") else f"\n{text}"


def _fit_between(left: str, block: str, right: str) -> str:
    """Pad ``block`` so it sits on its own lines between ``left`` and ``right``."""
    if not left.endswith("\n"):
        block = f"\n{block}"
    if not right.startswith("\n"):
        block = f"{block}\n"
    return block


class TextTool:
    """Line-oriented edits relative to markers in project files."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def insert_after(self, file: str, marker: str, block: str | list[str]) -> None:
        """Insert ``block`` after the first ``marker``; a no-op when the block is already present."""
        if not isinstance(marker, str) or not marker:
            raise SetupFailure("text.insert_after requires a non-empty marker string")
        path = resolve_project_path(self._root, file, "text file")
        content = read_text(path, file, "Text insert")
        text = normalize_text_input(block, "text.insert_after block")
        if text.strip() in content:
            return

        index = content.find(marker)
        if index == -1:
            raise SetupFailure(f'Marker "{marker}" not found in {file}')
        split_at = index + len(marker)
        before, after = content[:split_at], content[split_at:]
        insertion = _fit_between(before, text.rstrip("\n"), after)
        path.write_text(before + insertion + after, encoding="utf-8")

    def ensure_block(self, file: str, marker: str, block: str | list[str]) -> None:
        path = resolve_project_path(self._root, file, "text file")
        content = read_text(path, file, "Text ensure")
        text = normalize_text_input(block, "text.ensure_block block")
        if text.strip() in content:
            return
        self.insert_after(file, marker, text)

    def replace_between(self, file: str, start: str, end: str, block: str | list[str]) -> None:
        """Replace everything between ``start`` and the next ``end`` marker, keeping both markers."""
        if not isinstance(start, str) or not start or not isinstance(end, str) or not end:
            raise SetupFailure("text.replace_between requires non-empty start and end markers")
        path = resolve_project_path(self._root, file, "text file")
        content = read_text(path, file, "Text replace")

        start_index = content.find(start)
        if start_index == -1:
            raise SetupFailure(f'Start marker "{start}" not found in {file}')
        start_end = start_index + len(start)
        end_index = content.find(end, start_end)
        if end_index == -1:
            raise SetupFailure(f'End marker "{end}" not found in {file}')

        replacement = normalize_text_input(block, "text.replace_between block")
        replacement = _with_trailing_newline(_with_leading_newline(replacement)) if replacement else "\n"
        path.write_text(content[:start_end] + replacement + content[end_index:], encoding="utf-8")

    def append_lines(self, file: str, lines: str | list[str]) -> None:
        """Append lines to ``file``, creating it and its parents when missing."""
        path = resolve_project_path(self._root, file, "text file")
        content = ""
        if path.exists():
            content = read_text(path, file, "Text append")
        if content and not content.endswith("\n"):
            content += "\n"
        block = _with_trailing_newline(normalize_text_input(lines, "text.append_lines lines"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content + block, encoding="utf-8")

    def replace(
        self,
        file: str,
        search: str | re.Pattern[str],
        replace: str,
        ensure_match: bool = False,
    ) -> int:
        """Replace a literal string or compiled pattern; returns the number of matches."""
        if not isinstance(replace, str):
            raise SetupFailure("text.replace requires the replacement value to be a string")
        if isinstance(search, str):
            pattern = re.compile(re.escape(search))
        elif isinstance(search, re.Pattern):
            pattern = search
        else:
            raise SetupFailure("text.replace requires search to be a string or compiled pattern")

        path = resolve_project_path(self._root, file, "text file")
        content = read_text(path, file, "Text replace")
        updated, count = pattern.subn(lambda _match: replace, content)
        if count == 0:
            if ensure_match:
                raise SetupFailure(f"text.replace could not find a match in {file}")
            return 0
        if updated != content:
            path.write_text(updated, encoding="utf-8")
        return count
