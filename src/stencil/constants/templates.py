"""Names excluded when enumerating a template tree."""

from __future__ import annotations

TEMPLATE_IGNORED_NAMES: frozenset[str] = frozenset(
    {".git", ".template-undo.json", "node_modules", ".DS_Store"}
)
