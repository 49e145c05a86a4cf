"""Placeholder coercion and multi-source resolution."""

from __future__ import annotations

from stencil.placeholders.coercion import coerce_value, format_value
from stencil.placeholders.resolver import (
    PlaceholderResolution,
    PlaceholderSources,
    Prompter,
    ReportEntry,
    canonical_token,
    environment_values,
    resolve_placeholders,
)

__all__ = [
    "PlaceholderResolution",
    "PlaceholderSources",
    "Prompter",
    "ReportEntry",
    "canonical_token",
    "coerce_value",
    "environment_values",
    "format_value",
    "resolve_placeholders",
]
