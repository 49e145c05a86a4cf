"""Config data model for Stencil."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from collections.abc import Mapping

from stencil.constants.cache import DEFAULT_TTL_HOURS
from stencil.constants.config import (
    DEFAULT_CACHE_DIR,
    DEFAULT_REPO,
    DEFAULT_SETUP_TIMEOUT_SECONDS,
    SETUP_ON_FAILURE_WARN,
)
from stencil.types import SetupFailurePolicy


@dataclass(frozen=True)
class AuthorConfig:
    """Author details exposed to setup scripts."""

    name: str | None = None
    email: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class CacheConfig:
    """Repository cache location and freshness."""

    dir: Path = DEFAULT_CACHE_DIR
    ttl_hours: float = DEFAULT_TTL_HOURS


@dataclass(frozen=True)
class SetupConfig:
    """Setup-script execution policy."""

    on_failure: SetupFailurePolicy = SETUP_ON_FAILURE_WARN  # type: ignore[assignment]
    timeout_seconds: float = DEFAULT_SETUP_TIMEOUT_SECONDS


@dataclass(frozen=True)
class StencilConfig:
    """Resolved user configuration."""

    repo: str = DEFAULT_REPO
    branch: str | None = None
    author: AuthorConfig = AuthorConfig()
    placeholders: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    cache: CacheConfig = CacheConfig()
    setup: SetupConfig = SetupConfig()
    source: Path | None = None
