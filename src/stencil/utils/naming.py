"""String normalization helpers for project names."""

from __future__ import annotations

from stencil.constants.naming import (
    COLLAPSE_DASH_PATTERN,
    NON_PROJECT_NAME_PATTERN,
    PROJECT_NAME_FALLBACK,
)


def sanitize_project_name(raw_name: str) -> str:
    """Normalize a directory name into a stable project name."""
    normalized = raw_name.strip().lower()
    normalized = NON_PROJECT_NAME_PATTERN.sub("-", normalized)
    normalized = COLLAPSE_DASH_PATTERN.sub("-", normalized)
    normalized = normalized.strip("-._")
    return normalized or PROJECT_NAME_FALLBACK
