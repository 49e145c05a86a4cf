"""Repository cache layout, freshness, and locking constants."""

from __future__ import annotations

from typing import Any

CACHE_VERSION: int = 1
DEFAULT_TTL_HOURS: float = 24.0
CACHE_KEY_LENGTH: int = 16
DEFAULT_BRANCH_KEY: str = "__default__"

METADATA_FILENAME: str = "metadata.json"
TREE_DIRNAME: str = "tree"
STAGING_DIRNAME: str = ".staging"
TRASH_DIRNAME: str = ".trash"
LOCKS_DIRNAME: str = ".locks"
RESERVED_DIRNAMES: frozenset[str] = frozenset({STAGING_DIRNAME, TRASH_DIRNAME, LOCKS_DIRNAME})

METADATA_TEMP_PREFIX: str = ".metadata-"
METADATA_TEMP_SUFFIX: str = ".tmp"

LOCK_SUFFIX: str = ".lock"
LOCK_POLL_SECONDS: float = 0.1
LOCK_TIMEOUT_SECONDS: float = 300.0
LOCK_STALE_SECONDS: float = 900.0

GITHUB_URL_TEMPLATE: str = "https://github.com/{owner}/{name}.git"
FETCH_TIMEOUT_SECONDS: float = 120.0
FETCH_IGNORED_NAMES: frozenset[str] = frozenset({".git"})

CACHE_METADATA_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": [
        "cache_version",
        "repo_url",
        "branch",
        "repo_hash",
        "last_updated",
        "ttl_hours",
        "size_bytes",
        "template_count",
    ],
    "additionalProperties": False,
    "properties": {
        "cache_version": {"type": "integer", "const": CACHE_VERSION},
        "repo_url": {"type": "string", "minLength": 1},
        "branch": {"type": ["string", "null"]},
        "repo_hash": {"type": "string", "pattern": f"^[0-9a-f]{{{CACHE_KEY_LENGTH}}}$"},
        "last_updated": {"type": "string", "minLength": 1},
        "ttl_hours": {"type": "number", "exclusiveMinimum": 0},
        "size_bytes": {"type": "integer", "minimum": 0},
        "template_count": {"type": "integer", "minimum": 0},
    },
}
