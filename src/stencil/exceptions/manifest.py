"""Manifest-related exceptions."""

from __future__ import annotations

from stencil.exceptions.base import StencilError


class ManifestError(StencilError, ValueError):
    """Raised when a template manifest cannot be adapted into the canonical model."""
