"""Dry-run exceptions."""

from __future__ import annotations

from stencil.exceptions.base import StencilError


class PreviewUnavailable(StencilError):
    """Raised when a dry run targets a repository that is not cached or has expired."""
