"""Path confinement for setup tools."""

from __future__ import annotations

from pathlib import Path

from stencil.exceptions import PathEscapeError, SetupFailure


def resolve_project_path(root: Path, relative: str, label: str = "path") -> Path:
    """Resolve ``relative`` under ``root``, refusing anything that lands outside it."""
    if not isinstance(relative, str) or not relative.strip():
        raise SetupFailure(f"{label} must be a non-empty string")
    target = (root / relative).resolve()
    if target != root and not target.is_relative_to(root):
        raise PathEscapeError(f"{label} must stay within the project directory: {relative}")
    return target


def read_text(path: Path, relative: str, action: str) -> str:
    """Read a UTF-8 file for a text tool, translating I/O errors into SetupFailure."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SetupFailure(f"{action} target not found: {relative}") from None
    except (OSError, UnicodeDecodeError) as exc:
        raise SetupFailure(f"Failed to read {relative}: {exc}") from exc


def normalize_text_input(value: str | list[str] | tuple[str, ...], label: str) -> str:
    """Join a list of lines or return a string unchanged."""
    if isinstance(value, list | tuple):
        if not all(isinstance(line, str) for line in value):
            raise SetupFailure(f"{label} entries must be strings")
        return "\n".join(value)
    if not isinstance(value, str):
        raise SetupFailure(f"{label} must be a string or a list of strings")
    return value
