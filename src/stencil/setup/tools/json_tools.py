"""JSON document editing tool."""

from __future__ import annotations

import copy
import json
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeAlias

from stencil.exceptions import SetupFailure
from stencil.setup.tools.paths import resolve_project_path

_SEGMENT_PATTERN = re.compile(r"([^\[\]]+)|\[(\d+)\]")

Segment: TypeAlias = str | int


def parse_json_path(expression: str) -> list[Segment]:
    """Split ``a.b[0].c`` into ``["a", "b", 0, "c"]``."""
    if not isinstance(expression, str) or not expression.strip():
        raise SetupFailure("JSON path must be a non-empty string")
    segments: list[Segment] = []
    for part in expression.split("."):
        matches = list(_SEGMENT_PATTERN.finditer(part))
        if not matches or "".join(match.group(0) for match in matches) != part:
            raise SetupFailure(f'Invalid JSON path segment "{part}" in "{expression}"')
        for match in matches:
            if match.group(1) is not None:
                segments.append(match.group(1))
            else:
                segments.append(int(match.group(2)))
    if isinstance(segments[0], int):
        raise SetupFailure(f'JSON path must start with an object property: "{expression}"')
    return segments


def deep_merge(base: Any, patch: Any) -> Any:
    """Merge ``patch`` into a copy of ``base``; nested objects merge, everything else replaces."""
    if not isinstance(base, dict) or not isinstance(patch, Mapping):
        return copy.deepcopy(patch)
    merged = copy.deepcopy(base)
    for key, value in patch.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _pad(items: list[Any], index: int) -> None:
    while len(items) <= index:
        items.append(None)


def _container_for(next_segment: Segment) -> list[Any] | dict[str, Any]:
    return [] if isinstance(next_segment, int) else {}


def _walk_to_parent(target: Any, segments: list[Segment], *, create: bool) -> tuple[Any, Segment] | None:
    current = target
    for index, segment in enumerate(segments[:-1]):
        next_segment = segments[index + 1]
        if isinstance(segment, int):
            if not isinstance(current, list):
                raise SetupFailure("JSON path expected an array segment but found a non-array value")
            _pad(current, segment)
        elif not isinstance(current, dict):
            raise SetupFailure("JSON path expected an object segment but found a non-object value")

        child = current[segment] if isinstance(segment, int) else current.get(segment)
        expected = list if isinstance(next_segment, int) else dict
        if not isinstance(child, expected):
            if not create:
                return None
            child = _container_for(next_segment)
            current[segment] = child
        current = child
    return current, segments[-1]


def _assign(parent: Any, key: Segment, value: Any) -> None:
    if isinstance(key, int):
        if not isinstance(parent, list):
            raise SetupFailure("JSON path expected an array segment but found a non-array value")
        _pad(parent, key)
    elif not isinstance(parent, dict):
        raise SetupFailure("JSON path expected an object segment but found a non-object value")
    parent[key] = value


def _array_at(target: Any, segments: list[Segment]) -> list[Any]:
    resolved = _walk_to_parent(target, segments, create=True)
    assert resolved is not None
    parent, key = resolved
    if isinstance(parent, dict) and parent.get(key) is None:
        parent[key] = []
    elif isinstance(parent, list) and isinstance(key, int) and (key >= len(parent) or parent[key] is None):
        _assign(parent, key, [])
    current = parent[key]
    if not isinstance(current, list):
        raise SetupFailure("JSON path expected an array but found a non-array value")
    return current


class JsonTool:
    """Reads and edits JSON documents inside the project."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def read(self, file: str) -> Any:
        path = resolve_project_path(self._root, file, "JSON path")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise SetupFailure(f"JSON file not found: {file}") from None
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SetupFailure(f"Failed to read JSON ({file}): {exc}") from exc

    def write(self, file: str, data: Any) -> None:
        path = resolve_project_path(self._root, file, "JSON path")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def merge(self, file: str, patch: Mapping[str, Any]) -> Any:
        """Deep-merge ``patch`` into ``file``; a missing file is treated as ``{}``."""
        existing = self._load_or_empty(file)
        merged = deep_merge(existing, patch)
        self.write(file, merged)
        return merged

    def set(self, file: str, path: str, value: Any) -> None:
        def mutate(document: Any) -> None:
            resolved = _walk_to_parent(document, parse_json_path(path), create=True)
            assert resolved is not None
            parent, key = resolved
            _assign(parent, key, copy.deepcopy(value))

        self._edit(file, mutate)

    def remove(self, file: str, path: str) -> None:
        """Delete the value at ``path``; missing paths are left alone."""

        def mutate(document: Any) -> None:
            resolved = _walk_to_parent(document, parse_json_path(path), create=False)
            if resolved is None:
                return
            parent, key = resolved
            if isinstance(parent, dict) and isinstance(key, str):
                parent.pop(key, None)
            elif isinstance(parent, list) and isinstance(key, int) and key < len(parent):
                del parent[key]

        self._edit(file, mutate, allow_create=False)

    def add_to_array(self, file: str, path: str, value: Any, unique: bool = False) -> None:
        """Append ``value`` (or each item of a list value) to the array at ``path``."""
        items = value if isinstance(value, list) else [value]

        def mutate(document: Any) -> None:
            array = _array_at(document, parse_json_path(path))
            for item in items:
                if unique and item in array:
                    continue
                array.append(copy.deepcopy(item))

        self._edit(file, mutate)

    def merge_array(
        self,
        file: str,
        path: str,
        items: list[Any],
        merge_key: str | None = None,
        unique: bool = False,
    ) -> None:
        """Upsert ``items`` by ``merge_key`` when given, otherwise append them."""
        if not isinstance(items, list):
            raise SetupFailure("json.merge_array requires a list of items")

        def mutate(document: Any) -> None:
            array = _array_at(document, parse_json_path(path))
            for item in items:
                if merge_key and isinstance(item, dict):
                    position = next(
                        (
                            index
                            for index, existing in enumerate(array)
                            if isinstance(existing, dict) and existing.get(merge_key) == item.get(merge_key)
                        ),
                        None,
                    )
                    if position is not None:
                        array[position] = deep_merge(array[position], item)
                        continue
                elif unique and item in array:
                    continue
                array.append(copy.deepcopy(item))

        self._edit(file, mutate)

    def _load_or_empty(self, file: str) -> Any:
        path = resolve_project_path(self._root, file, "JSON path")
        if not path.exists():
            return {}
        return self.read(file)

    def _edit(self, file: str, mutate: Callable[[Any], None], *, allow_create: bool = True) -> None:
        document = self._load_or_empty(file) if allow_create else self.read(file)
        if not isinstance(document, dict | list):
            raise SetupFailure(f"JSON document {file} must be an object or array to edit by path")
        mutate(document)
        self.write(file, document)
