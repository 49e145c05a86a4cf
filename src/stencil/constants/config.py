"""Configuration file locations, environment variables, and defaults."""

from __future__ import annotations

from pathlib import Path

CONFIG_FILENAME: str = ".stencil.yaml"
USER_CONFIG_PATH: Path = Path("~/.config/stencil/config.yaml")

CONFIG_PATH_ENV: str = "STENCIL_CONFIG_PATH"
CACHE_DIR_ENV: str = "STENCIL_CACHE_DIR"
PLACEHOLDER_ENV_PREFIX: str = "STENCIL_PLACEHOLDER_"

DEFAULT_REPO: str = "stencil-templates/templates"
DEFAULT_CACHE_DIR: Path = Path("~/.cache/stencil/templates")

SETUP_ON_FAILURE_WARN: str = "warn"
SETUP_ON_FAILURE_ABORT: str = "abort"
VALID_SETUP_ON_FAILURE: frozenset[str] = frozenset({SETUP_ON_FAILURE_WARN, SETUP_ON_FAILURE_ABORT})
DEFAULT_SETUP_TIMEOUT_SECONDS: float = 30.0

ALLOWED_TOP_LEVEL_KEYS: frozenset[str] = frozenset(
    {"repo", "branch", "author", "placeholders", "cache", "setup"}
)
ALLOWED_AUTHOR_KEYS: frozenset[str] = frozenset({"name", "email", "url"})
ALLOWED_CACHE_KEYS: frozenset[str] = frozenset({"dir", "ttl_hours"})
ALLOWED_SETUP_KEYS: frozenset[str] = frozenset({"on_failure", "timeout_seconds"})
