"""Configuration-related exceptions."""

from __future__ import annotations

from stencil.exceptions.base import StencilError


class ConfigError(StencilError, ValueError):
    """Raised when the rc file or a provisioning request is invalid."""
