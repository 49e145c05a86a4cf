"""Tests for per-key cache locks."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from stencil.cache.locks import KeyLock
from stencil.exceptions import CacheLockTimeout


def test_lock_is_exclusive_per_key(tmp_path: Path) -> None:
    with KeyLock(tmp_path, "aaaa", timeout=0):
        with pytest.raises(CacheLockTimeout):
            KeyLock(tmp_path, "aaaa", timeout=0).acquire()
        with KeyLock(tmp_path, "bbbb", timeout=0):
            pass

    with KeyLock(tmp_path, "aaaa", timeout=0):
        pass


def test_stale_lock_is_broken(tmp_path: Path) -> None:
    lock_path = tmp_path / "aaaa.lock"
    lock_path.write_text("12345 0\n", encoding="utf-8")
    old = time.time() - 3600
    os.utime(lock_path, (old, old))

    with KeyLock(tmp_path, "aaaa", timeout=0, stale_seconds=60):
        assert lock_path.exists()

    assert not lock_path.exists()
