"""Repository cache: key derivation, fetching, and freshness."""

from __future__ import annotations

from stencil.cache.fetch import Fetcher, GitFetcher
from stencil.cache.keys import cache_key, fetch_url, normalize_locator
from stencil.cache.repo_cache import CacheEntry, CacheMiss, RepoCache

__all__ = [
    "CacheEntry",
    "CacheMiss",
    "Fetcher",
    "GitFetcher",
    "RepoCache",
    "cache_key",
    "fetch_url",
    "normalize_locator",
]
