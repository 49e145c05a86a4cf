"""Tests for RepoCache behaviour when several runs share one cache root."""

from __future__ import annotations

import os
import threading
import time
from pathlib import Path

import pytest

from stencil.cache import CacheMiss, RepoCache
from stencil.cache import repo_cache as repo_cache_module

LOCATOR = "user/repo"
BRANCH = "main"


class SlowFetcher:
    """Wraps a fetcher so each fetch takes long enough for callers to overlap."""

    def __init__(self, inner, delay: float) -> None:
        self.inner = inner
        self.delay = delay
        self.calls: list[tuple[str, str | None]] = []

    def fetch(self, url: str, branch: str | None, destination: Path, *, timeout: float) -> None:
        self.calls.append((url, branch))
        time.sleep(self.delay)
        self.inner.fetch(url, branch, destination, timeout=timeout)


def _run_concurrently(*targets) -> list:
    barrier = threading.Barrier(len(targets))
    results: list = [None] * len(targets)
    errors: list[BaseException] = []

    def runner(index: int, target) -> None:
        barrier.wait()
        try:
            results[index] = target()
        except BaseException as exc:
            errors.append(exc)

    threads = [threading.Thread(target=runner, args=(index, target)) for index, target in enumerate(targets)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    assert errors == []
    return results


def test_same_key_ensure_fetches_once(cache_root: Path, fake_fetcher, frozen_clock) -> None:
    fetcher = SlowFetcher(fake_fetcher, delay=0.2)
    cache = RepoCache(cache_root, fetcher=fetcher, clock=frozen_clock, lock_timeout=5.0)

    first, second = _run_concurrently(
        lambda: cache.ensure(LOCATOR, BRANCH),
        lambda: cache.ensure(LOCATOR, BRANCH),
    )

    assert fetcher.calls == [("https://github.com/user/repo.git", BRANCH)]
    assert first == second
    assert (first / "webapp" / "package.json").is_file()


def test_different_keys_do_not_block_each_other(repo_cache: RepoCache, cache_root: Path, fake_fetcher, frozen_clock) -> None:
    impatient = RepoCache(cache_root, fetcher=fake_fetcher, clock=frozen_clock, lock_timeout=0)

    with repo_cache._lock(repo_cache.key_for(LOCATOR, BRANCH)):
        tree = impatient.ensure(LOCATOR, "dev")

    assert tree.is_dir()
    assert isinstance(impatient.resolve(LOCATOR, BRANCH), CacheMiss)


def test_reader_leaves_entry_alone_while_writer_holds_lock(repo_cache: RepoCache, monkeypatch: pytest.MonkeyPatch) -> None:
    tree = repo_cache.ensure(LOCATOR, BRANCH)
    key = repo_cache.key_for(LOCATOR, BRANCH)
    entry_dir = repo_cache.root / key
    writer_lock = repo_cache._lock(key)

    def read_during_publish(path: Path, *, expected_hash: str):
        # A writer takes the lock and swaps the entry out and back in.
        writer_lock.acquire()
        aside = repo_cache.root / ".trash" / key
        aside.parent.mkdir(parents=True, exist_ok=True)
        os.replace(entry_dir, aside)
        os.replace(aside, entry_dir)
        return None

    monkeypatch.setattr(repo_cache_module, "read_metadata", read_during_publish)
    try:
        result = repo_cache.resolve(LOCATOR, BRANCH)
    finally:
        writer_lock.release()
    monkeypatch.undo()

    assert isinstance(result, CacheMiss)
    assert result.reason == "corrupted"
    assert entry_dir.is_dir()
    assert repo_cache.resolve(LOCATOR, BRANCH) == tree


def test_reader_rechecks_entry_after_taking_lock(repo_cache: RepoCache, monkeypatch: pytest.MonkeyPatch) -> None:
    tree = repo_cache.ensure(LOCATOR, BRANCH)
    real_read_metadata = repo_cache_module.read_metadata
    reads: list[Path] = []

    def read_once_mid_swap(path: Path, *, expected_hash: str):
        reads.append(path)
        if len(reads) == 1:
            return None
        return real_read_metadata(path, expected_hash=expected_hash)

    monkeypatch.setattr(repo_cache_module, "read_metadata", read_once_mid_swap)

    assert repo_cache.resolve(LOCATOR, BRANCH) == tree
    assert len(reads) == 2
    assert tree.is_dir()


def test_resolve_during_refresh_keeps_published_entry(repo_cache: RepoCache, cache_root: Path, fake_fetcher, frozen_clock) -> None:
    repo_cache.ensure(LOCATOR, BRANCH)
    fetcher = SlowFetcher(fake_fetcher, delay=0.1)
    writer = RepoCache(cache_root, fetcher=fetcher, clock=frozen_clock, lock_timeout=5.0)

    def keep_resolving() -> list[Path | CacheMiss]:
        seen = []
        deadline = time.monotonic() + 0.5
        while time.monotonic() < deadline:
            seen.append(repo_cache.resolve(LOCATOR, BRANCH))
        return seen

    entry, seen = _run_concurrently(lambda: writer.refresh(LOCATOR, BRANCH), keep_resolving)

    assert entry.tree.is_dir()
    assert (entry.tree / "webapp" / "package.json").is_file()
    assert repo_cache.resolve(LOCATOR, BRANCH) == entry.tree
    assert all(isinstance(result, Path) or result.reason in ("absent", "corrupted") for result in seen)
