"""Content-addressed repository cache with TTL freshness and corruption recovery."""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from stencil.cache.fetch import Fetcher, GitFetcher
from stencil.cache.keys import cache_key, fetch_url, normalize_branch, normalize_locator
from stencil.cache.locks import KeyLock
from stencil.cache.metadata import build_metadata, parse_timestamp, read_metadata
from stencil.constants.cache import (
    DEFAULT_BRANCH_KEY,
    DEFAULT_TTL_HOURS,
    FETCH_TIMEOUT_SECONDS,
    LOCK_TIMEOUT_SECONDS,
    LOCKS_DIRNAME,
    METADATA_FILENAME,
    METADATA_TEMP_PREFIX,
    METADATA_TEMP_SUFFIX,
    RESERVED_DIRNAMES,
    STAGING_DIRNAME,
    TRASH_DIRNAME,
    TREE_DIRNAME,
)
from stencil.exceptions import CacheLockTimeout, ConfigError
from stencil.io import remove_tree, write_json_atomic
from stencil.types import CacheMetadata, LookupReason

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class CacheEntry:
    """A cached repository tree and its metadata."""

    key: str
    path: Path
    repo_url: str
    branch: str | None
    last_refresh: datetime
    ttl_hours: float
    size_bytes: int
    template_count: int

    @property
    def tree(self) -> Path:
        """Directory holding the fetched repository contents."""
        return self.path / TREE_DIRNAME

    def is_stale(self, now: datetime, ttl_hours: float | None = None) -> bool:
        """Return True when more than the TTL has elapsed since the last refresh."""
        ttl = self.ttl_hours if ttl_hours is None else ttl_hours
        return now - self.last_refresh > timedelta(hours=ttl)


@dataclass(frozen=True)
class CacheMiss:
    """Recoverable signal that a repository is not usable from the cache."""

    key: str
    reason: LookupReason


class RepoCache:
    """Maps (repository locator, branch) to a locally materialized directory.

    Every entry lives at ``<root>/<key>/`` with a ``metadata.json`` record and the
    fetched ``tree/``. Writers stage a complete entry under ``<root>/.staging`` and
    rename it into place while holding the key's lock, so readers never observe a
    half-written entry.
    """

    def __init__(
        self,
        root: Path,
        *,
        fetcher: Fetcher | None = None,
        ttl_hours: float = DEFAULT_TTL_HOURS,
        clock: Callable[[], datetime] = _utcnow,
        fetch_timeout: float = FETCH_TIMEOUT_SECONDS,
        lock_timeout: float = LOCK_TIMEOUT_SECONDS,
    ) -> None:
        _validate_ttl(ttl_hours)
        self.root = root.expanduser()
        self.ttl_hours = float(ttl_hours)
        self._fetcher: Fetcher = fetcher if fetcher is not None else GitFetcher()
        self._clock = clock
        self._fetch_timeout = fetch_timeout
        self._lock_timeout = lock_timeout

    def key_for(self, locator: str, branch: str | None) -> str:
        """Return the cache key for a repository and branch."""
        return cache_key(locator, branch)

    def resolve(
        self,
        locator: str,
        branch: str | None,
        *,
        no_cache: bool = False,
        ttl_override: float | None = None,
    ) -> Path | CacheMiss:
        """Return the cached tree for a repository, or a CacheMiss. Never fetches."""
        if ttl_override is not None:
            _validate_ttl(ttl_override)
        key = self.key_for(locator, branch)
        if no_cache:
            return CacheMiss(key=key, reason="no_cache")
        return self._lookup(key, ttl_override)

    def ensure(
        self,
        locator: str,
        branch: str | None,
        *,
        no_cache: bool = False,
        ttl_override: float | None = None,
    ) -> Path:
        """Return a fresh cached tree, fetching and publishing it on a miss."""
        result = self.resolve(locator, branch, no_cache=no_cache, ttl_override=ttl_override)
        if isinstance(result, Path):
            return result

        logger.info("Template cache miss for %s (%s)", locator, result.reason)
        with self._lock(result.key):
            if not no_cache:
                again = self._lookup(result.key, ttl_override, locked=True)
                if isinstance(again, Path):
                    return again
            return self._fetch_and_publish(locator, branch, result.key).tree

    def refresh(self, locator: str, branch: str | None) -> CacheEntry:
        """Fetch and publish a repository unconditionally."""
        key = self.key_for(locator, branch)
        with self._lock(key):
            return self._fetch_and_publish(locator, branch, key)

    def entry(self, locator: str, branch: str | None) -> CacheEntry | None:
        """Return the entry for a repository regardless of freshness."""
        entry, _reason = self._load_entry(self.key_for(locator, branch))
        return entry

    def evict(self, locator: str, branch: str | None) -> bool:
        """Remove one entry. Returns True when an entry was removed."""
        key = self.key_for(locator, branch)
        entry_dir = self.root / key
        with self._lock(key):
            if not entry_dir.exists():
                return False
            return remove_tree(entry_dir)

    def list_entries(self) -> list[CacheEntry]:
        """Return all usable entries sorted by key."""
        entries: list[CacheEntry] = []
        for key in self._iter_keys():
            entry, _reason = self._load_entry(key)
            if entry is not None:
                entries.append(entry)
        return entries

    def clear(self) -> int:
        """Remove every entry. Returns the number of entries removed."""
        removed = 0
        for key in self._iter_keys():
            try:
                with self._lock(key, timeout=0):
                    if remove_tree(self.root / key):
                        removed += 1
            except CacheLockTimeout:
                logger.warning("Skipping cache entry %s: in use", key)
        return removed

    def gc(self, *, ttl_override: float | None = None) -> int:
        """Delete expired and corrupted entries plus abandoned staging data.

        Entries that vanish or fail mid-sweep are skipped. Returns the number of
        entries removed.
        """
        if ttl_override is not None:
            _validate_ttl(ttl_override)
        now = self._clock()
        removed = 0
        for key in self._iter_keys():
            try:
                with self._lock(key, timeout=0):
                    entry, reason = self._load_entry(key, locked=True)
                    if entry is None:
                        if reason == "corrupted":
                            removed += 1
                        continue
                    if entry.is_stale(now, ttl_override) and remove_tree(entry.path):
                        logger.info("Removed expired cache entry %s (%s)", key, entry.repo_url)
                        removed += 1
            except CacheLockTimeout:
                logger.warning("Skipping cache entry %s: in use", key)
            except OSError as exc:
                logger.warning("Skipping cache entry %s: %s", key, exc)
        self._sweep_scratch(STAGING_DIRNAME)
        self._sweep_scratch(TRASH_DIRNAME)
        return removed

    def _lookup(self, key: str, ttl_override: float | None, *, locked: bool = False) -> Path | CacheMiss:
        entry, reason = self._load_entry(key, locked=locked)
        if entry is None:
            return CacheMiss(key=key, reason=reason)
        if entry.is_stale(self._clock(), ttl_override):
            logger.debug("Cache entry %s is stale", key)
            return CacheMiss(key=key, reason="stale")
        return entry.tree

    def _load_entry(self, key: str, *, locked: bool = False) -> tuple[CacheEntry | None, LookupReason]:
        """Load an entry, tearing it down when metadata and tree disagree.

        The teardown only happens under the key's lock, and the entry is checked
        again once the lock is held. When a writer holds the lock the entry is
        reported as corrupted but left alone.
        """
        entry, reason = self._inspect_entry(key)
        if reason != "corrupted":
            return entry, reason
        if locked:
            self._discard_corrupted(key)
            return None, "corrupted"
        try:
            with self._lock(key, timeout=0):
                entry, reason = self._inspect_entry(key)
                if reason == "corrupted":
                    self._discard_corrupted(key)
                return entry, reason
        except CacheLockTimeout:
            logger.debug("Cache entry %s looks corrupted while a writer holds its lock", key)
            return None, "corrupted"

    def _inspect_entry(self, key: str) -> tuple[CacheEntry | None, LookupReason]:
        entry_dir = self.root / key
        if not entry_dir.exists():
            return None, "absent"

        metadata_path = entry_dir / METADATA_FILENAME
        tree = entry_dir / TREE_DIRNAME
        metadata = read_metadata(metadata_path, expected_hash=key) if metadata_path.is_file() else None
        if metadata is None or not tree.is_dir():
            return None, "corrupted"
        return _entry_from_metadata(key, entry_dir, metadata), "fresh"

    def _discard_corrupted(self, key: str) -> None:
        logger.warning("Cache entry %s is corrupted; removing it", key)
        remove_tree(self.root / key)

    def _fetch_and_publish(self, locator: str, branch: str | None, key: str) -> CacheEntry:
        staging = self.root / STAGING_DIRNAME / f"{key}-{uuid.uuid4().hex}"
        trash: Path | None = None
        staging.mkdir(parents=True)
        try:
            tree = staging / TREE_DIRNAME
            self._fetcher.fetch(fetch_url(locator), _fetch_branch(branch), tree, timeout=self._fetch_timeout)
            metadata = build_metadata(
                repo_url=normalize_locator(locator),
                branch=_fetch_branch(branch),
                repo_hash=key,
                refreshed_at=self._clock(),
                ttl_hours=self.ttl_hours,
                tree=tree,
            )
            write_json_atomic(
                path=staging / METADATA_FILENAME,
                payload=metadata,
                temp_prefix=METADATA_TEMP_PREFIX,
                temp_suffix=METADATA_TEMP_SUFFIX,
            )
            target = self.root / key
            if target.exists():
                trash = self.root / TRASH_DIRNAME / f"{key}-{uuid.uuid4().hex}"
                trash.parent.mkdir(parents=True, exist_ok=True)
                os.replace(target, trash)
            os.replace(staging, target)
        except BaseException:
            remove_tree(staging)
            raise
        finally:
            if trash is not None:
                remove_tree(trash)

        logger.info(
            "Cached %s at %s (%d bytes, %d templates)",
            metadata["repo_url"],
            target,
            metadata["size_bytes"],
            metadata["template_count"],
        )
        return _entry_from_metadata(key, target, metadata)

    def _lock(self, key: str, *, timeout: float | None = None) -> KeyLock:
        return KeyLock(
            self.root / LOCKS_DIRNAME,
            key,
            timeout=self._lock_timeout if timeout is None else timeout,
        )

    def _iter_keys(self) -> Iterator[str]:
        if not self.root.is_dir():
            return
        for child in sorted(self.root.iterdir()):
            if child.name in RESERVED_DIRNAMES or not child.is_dir():
                continue
            yield child.name

    def _sweep_scratch(self, dirname: str) -> None:
        """Remove staging or trash directories whose key is not locked by a writer."""
        scratch = self.root / dirname
        if not scratch.is_dir():
            return
        for child in sorted(scratch.iterdir()):
            key, _sep, _suffix = child.name.partition("-")
            try:
                with self._lock(key, timeout=0):
                    remove_tree(child)
            except CacheLockTimeout:
                continue
            except OSError as exc:
                logger.warning("Failed to remove %s: %s", child, exc)


def _fetch_branch(branch: str | None) -> str | None:
    normalized = normalize_branch(branch)
    return None if normalized == DEFAULT_BRANCH_KEY else normalized


def _entry_from_metadata(key: str, entry_dir: Path, metadata: CacheMetadata) -> CacheEntry:
    last_refresh = parse_timestamp(metadata["last_updated"])
    assert last_refresh is not None
    return CacheEntry(
        key=key,
        path=entry_dir,
        repo_url=metadata["repo_url"],
        branch=metadata["branch"],
        last_refresh=last_refresh,
        ttl_hours=metadata["ttl_hours"],
        size_bytes=metadata["size_bytes"],
        template_count=metadata["template_count"],
    )


def _validate_ttl(ttl_hours: float) -> None:
    if isinstance(ttl_hours, bool) or not isinstance(ttl_hours, int | float) or not ttl_hours > 0:
        raise ConfigError(f"Cache TTL must be a positive number of hours, got {ttl_hours!r}")
