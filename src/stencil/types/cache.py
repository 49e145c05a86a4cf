"""Typed cache payload structures."""

from __future__ import annotations

from typing import TypedDict


class CacheMetadata(TypedDict):
    """Metadata record persisted beside each cached repository tree."""

    cache_version: int
    repo_url: str
    branch: str | None
    repo_hash: str
    last_updated: str
    ttl_hours: float
    size_bytes: int
    template_count: int
