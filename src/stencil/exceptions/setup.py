"""Setup-script runtime exceptions."""

from __future__ import annotations

from stencil.exceptions.base import StencilError


class SandboxViolation(StencilError):
    """Raised when the static guard rejects a setup script before execution."""


class PathEscapeError(SandboxViolation):
    """Raised when a tool path resolves outside the project directory."""


class SetupFailure(StencilError):
    """Raised when a setup script fails to load or raises while running."""


class SetupTimeout(SetupFailure):
    """Raised when a setup script exceeds its execution deadline."""
