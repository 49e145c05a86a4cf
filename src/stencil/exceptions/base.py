"""Root exception for Stencil."""

from __future__ import annotations


class StencilError(Exception):
    """Base class for all Stencil errors."""
