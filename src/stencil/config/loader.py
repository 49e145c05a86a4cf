"""Config loading and normalization for Stencil."""

from __future__ import annotations

import difflib
import logging
import math
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from stencil.config.model import AuthorConfig, CacheConfig, SetupConfig, StencilConfig
from stencil.constants.cache import DEFAULT_TTL_HOURS
from stencil.constants.config import (
    ALLOWED_AUTHOR_KEYS,
    ALLOWED_CACHE_KEYS,
    ALLOWED_SETUP_KEYS,
    ALLOWED_TOP_LEVEL_KEYS,
    CACHE_DIR_ENV,
    CONFIG_FILENAME,
    CONFIG_PATH_ENV,
    DEFAULT_CACHE_DIR,
    DEFAULT_REPO,
    DEFAULT_SETUP_TIMEOUT_SECONDS,
    SETUP_ON_FAILURE_WARN,
    USER_CONFIG_PATH,
    VALID_SETUP_ON_FAILURE,
)
from stencil.exceptions import ConfigError

logger = logging.getLogger(__name__)


def find_config_path(
    explicit_path: Path | None = None,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Path | None:
    """Return the config file to load, or None when no candidate exists."""
    environ = os.environ if env is None else env
    if explicit_path is not None:
        path = explicit_path.expanduser().resolve()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path

    env_path = environ.get(CONFIG_PATH_ENV, "").strip()
    if env_path:
        path = Path(env_path).expanduser().resolve()
        if not path.is_file():
            raise ConfigError(f"Config file from {CONFIG_PATH_ENV} not found: {path}")
        return path

    candidates = [(cwd or Path.cwd()) / CONFIG_FILENAME, USER_CONFIG_PATH.expanduser()]
    for candidate in candidates:
        if candidate.is_file():
            return candidate.resolve()
    return None


def load_config(
    config_path: Path | None = None,
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> StencilConfig:
    """Load and validate user config from ``.stencil.yaml`` or an explicit path."""
    environ = os.environ if env is None else env
    path = find_config_path(config_path, cwd=cwd, env=environ)
    raw: dict[str, Any] = {}
    if path is not None:
        raw = _read_mapping(path)
        logger.debug("Loaded config from %s", path)

    _reject_unknown_keys(raw, ALLOWED_TOP_LEVEL_KEYS, "")

    repo = raw.get("repo", DEFAULT_REPO)
    if not isinstance(repo, str) or not repo.strip():
        raise ConfigError("repo must be a non-empty string")

    branch = raw.get("branch")
    if branch is not None and (not isinstance(branch, str) or not branch.strip()):
        raise ConfigError("branch must be a non-empty string when set")

    config = StencilConfig(
        repo=repo.strip(),
        branch=branch.strip() if isinstance(branch, str) else None,
        author=_build_author(_ensure_mapping(raw.get("author"), "author")),
        placeholders=_build_placeholders(_ensure_mapping(raw.get("placeholders"), "placeholders")),
        cache=_build_cache(_ensure_mapping(raw.get("cache"), "cache"), environ),
        setup=_build_setup(_ensure_mapping(raw.get("setup"), "setup")),
        source=path,
    )
    return config


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML config file at {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read config file at {path}: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file at {path} must be a YAML mapping")
    return raw


def _ensure_mapping(value: Any, key_name: str) -> dict[str, Any]:
    """Coerce a nested block to a mapping, raising ConfigError on type mismatch."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key_name} must be a mapping")
    return value


def _reject_unknown_keys(raw: dict[str, Any], allowed: frozenset[str], prefix: str) -> None:
    for key in raw:
        if key in allowed:
            continue
        name = f"{prefix}{key}"
        suggestion = _suggest_key(str(key), allowed)
        message = f"Unknown config key: {name}"
        if suggestion:
            message = f"{message} ({suggestion})"
        raise ConfigError(message)


def _suggest_key(unknown: str, allowed: frozenset[str]) -> str:
    """Return a close-match suggestion for an unknown key, or empty string."""
    matches = difflib.get_close_matches(unknown, sorted(allowed), n=1, cutoff=0.6)
    if matches:
        return f"did you mean `{matches[0]}`?"
    return ""


def _build_author(raw: dict[str, Any]) -> AuthorConfig:
    _reject_unknown_keys(raw, ALLOWED_AUTHOR_KEYS, "author.")
    values: dict[str, str | None] = {}
    for key in sorted(ALLOWED_AUTHOR_KEYS):
        value = raw.get(key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"author.{key} must be a string")
        values[key] = value.strip() if isinstance(value, str) and value.strip() else None
    return AuthorConfig(**values)


def _build_placeholders(raw: dict[str, Any]) -> Mapping[str, str]:
    placeholders: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(key, str) or not key.strip():
            raise ConfigError("placeholders keys must be non-empty strings")
        if isinstance(value, bool):
            placeholders[key.strip()] = "true" if value else "false"
        elif isinstance(value, str | int | float):
            placeholders[key.strip()] = str(value)
        else:
            raise ConfigError(f"placeholders.{key} must be a string, number, or boolean")
    return MappingProxyType(placeholders)


def _build_cache(raw: dict[str, Any], environ: Mapping[str, str]) -> CacheConfig:
    _reject_unknown_keys(raw, ALLOWED_CACHE_KEYS, "cache.")
    directory = raw.get("dir")
    if directory is not None and (not isinstance(directory, str) or not directory.strip()):
        raise ConfigError("cache.dir must be a non-empty string")
    env_dir = environ.get(CACHE_DIR_ENV, "").strip()
    if env_dir:
        directory = env_dir
    cache_dir = Path(directory).expanduser() if directory else DEFAULT_CACHE_DIR.expanduser()

    ttl_hours = _positive_number(raw.get("ttl_hours", DEFAULT_TTL_HOURS), "cache.ttl_hours")
    return CacheConfig(dir=cache_dir, ttl_hours=ttl_hours)


def _build_setup(raw: dict[str, Any]) -> SetupConfig:
    _reject_unknown_keys(raw, ALLOWED_SETUP_KEYS, "setup.")
    on_failure = raw.get("on_failure", SETUP_ON_FAILURE_WARN)
    if on_failure not in VALID_SETUP_ON_FAILURE:
        raise ConfigError(
            f"setup.on_failure must be one of {sorted(VALID_SETUP_ON_FAILURE)}, got {on_failure!r}"
        )
    timeout = _positive_number(raw.get("timeout_seconds", DEFAULT_SETUP_TIMEOUT_SECONDS), "setup.timeout_seconds")
    return SetupConfig(on_failure=on_failure, timeout_seconds=timeout)


def _positive_number(value: Any, key_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigError(f"{key_name} must be a positive number")
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{key_name} must be a positive number")
    return float(value)
