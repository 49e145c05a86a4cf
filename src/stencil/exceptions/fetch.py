"""Repository fetch exceptions."""

from __future__ import annotations

from stencil.exceptions.base import StencilError


class FetchError(StencilError):
    """Raised when a template repository cannot be fetched."""


class FetchTimeout(FetchError):
    """Raised when a repository fetch exceeds its deadline."""


class CacheLockTimeout(StencilError):
    """Raised when a per-key cache lock cannot be acquired in time."""
