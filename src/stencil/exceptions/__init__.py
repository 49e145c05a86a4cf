"""Shared exception hierarchy for Stencil."""

from __future__ import annotations

from .base import StencilError
from .config import ConfigError
from .fetch import CacheLockTimeout, FetchError, FetchTimeout
from .manifest import ManifestError
from .preview import PreviewUnavailable
from .setup import PathEscapeError, SandboxViolation, SetupFailure, SetupTimeout
from .validation import (
    AggregateValidationError,
    MissingRequiredError,
    OptionsValidationError,
    PlaceholderValidationError,
    ValidationIssue,
)

__all__ = [
    "AggregateValidationError",
    "CacheLockTimeout",
    "ConfigError",
    "FetchError",
    "FetchTimeout",
    "ManifestError",
    "MissingRequiredError",
    "OptionsValidationError",
    "PathEscapeError",
    "PlaceholderValidationError",
    "PreviewUnavailable",
    "SandboxViolation",
    "SetupFailure",
    "SetupTimeout",
    "StencilError",
    "ValidationIssue",
]
