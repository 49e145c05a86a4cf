"""Cache metadata record construction, parsing, and template counting."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from pathlib import Path

from stencil.constants.cache import CACHE_KEY_LENGTH, CACHE_VERSION
from stencil.constants.manifest import MANIFEST_FILENAME
from stencil.io import directory_size, load_json_file
from stencil.types import CacheMetadata


def format_timestamp(moment: datetime) -> str:
    """Return an ISO-8601 UTC timestamp."""
    return moment.astimezone(UTC).isoformat()


def parse_timestamp(raw: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is present."""
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def count_templates(tree: Path) -> int:
    """Count templates: the tree root itself, or each top-level directory holding a manifest."""
    if (tree / MANIFEST_FILENAME).is_file():
        return 1
    return sum(1 for child in tree.iterdir() if child.is_dir() and (child / MANIFEST_FILENAME).is_file())


def build_metadata(
    *,
    repo_url: str,
    branch: str | None,
    repo_hash: str,
    refreshed_at: datetime,
    ttl_hours: float,
    tree: Path,
) -> CacheMetadata:
    """Build the metadata record for a freshly fetched tree."""
    return {
        "cache_version": CACHE_VERSION,
        "repo_url": repo_url,
        "branch": branch,
        "repo_hash": repo_hash,
        "last_updated": format_timestamp(refreshed_at),
        "ttl_hours": float(ttl_hours),
        "size_bytes": directory_size(tree),
        "template_count": count_templates(tree),
    }


def read_metadata(path: Path, *, expected_hash: str) -> CacheMetadata | None:
    """Load a metadata record, returning None when it is missing, unparsable, or inconsistent."""
    try:
        payload = load_json_file(path)
    except (OSError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None

    repo_url = payload.get("repo_url")
    branch = payload.get("branch")
    repo_hash = payload.get("repo_hash")
    last_updated = payload.get("last_updated")
    ttl_hours = payload.get("ttl_hours")
    size_bytes = payload.get("size_bytes")
    template_count = payload.get("template_count")

    if payload.get("cache_version") != CACHE_VERSION:
        return None
    if not isinstance(repo_url, str) or not repo_url:
        return None
    if branch is not None and not isinstance(branch, str):
        return None
    if not isinstance(repo_hash, str) or len(repo_hash) != CACHE_KEY_LENGTH or repo_hash != expected_hash:
        return None
    if not isinstance(last_updated, str) or parse_timestamp(last_updated) is None:
        return None
    if isinstance(ttl_hours, bool) or not isinstance(ttl_hours, int | float):
        return None
    if not math.isfinite(ttl_hours) or ttl_hours <= 0:
        return None
    if isinstance(size_bytes, bool) or not isinstance(size_bytes, int) or size_bytes < 0:
        return None
    if isinstance(template_count, bool) or not isinstance(template_count, int) or template_count < 0:
        return None

    return {
        "cache_version": CACHE_VERSION,
        "repo_url": repo_url,
        "branch": branch,
        "repo_hash": repo_hash,
        "last_updated": last_updated,
        "ttl_hours": float(ttl_hours),
        "size_bytes": size_bytes,
        "template_count": template_count,
    }
