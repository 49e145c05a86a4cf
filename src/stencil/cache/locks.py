"""Per-key exclusive lock files for cache writers."""

from __future__ import annotations

import logging
import os
import time
from contextlib import suppress
from pathlib import Path
from types import TracebackType

from stencil.constants.cache import (
    LOCK_POLL_SECONDS,
    LOCK_STALE_SECONDS,
    LOCK_SUFFIX,
    LOCK_TIMEOUT_SECONDS,
)
from stencil.exceptions import CacheLockTimeout

logger = logging.getLogger(__name__)


class KeyLock:
    """Exclusive lock on one cache key, held by creating ``<key>.lock`` with O_EXCL.

    Locks on different keys never contend. A lock file older than ``stale_seconds``
    is assumed to belong to a crashed writer and is broken.
    """

    def __init__(
        self,
        locks_dir: Path,
        key: str,
        *,
        timeout: float = LOCK_TIMEOUT_SECONDS,
        poll_interval: float = LOCK_POLL_SECONDS,
        stale_seconds: float = LOCK_STALE_SECONDS,
    ) -> None:
        self.path = locks_dir / f"{key}{LOCK_SUFFIX}"
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._stale_seconds = stale_seconds
        self._held = False

    def acquire(self) -> None:
        """Block until the lock is held or the timeout elapses."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        deadline = time.monotonic() + self._timeout
        while True:
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
            except FileExistsError:
                if self._break_if_stale():
                    continue
                if time.monotonic() >= deadline:
                    raise CacheLockTimeout(f"Timed out waiting for cache lock {self.path}") from None
                time.sleep(self._poll_interval)
                continue
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(f"{os.getpid()} {time.time():.3f}\n")
            self._held = True
            logger.debug("Acquired cache lock %s", self.path)
            return

    def release(self) -> None:
        """Release the lock if held."""
        if not self._held:
            return
        with suppress(FileNotFoundError):
            self.path.unlink()
        self._held = False
        logger.debug("Released cache lock %s", self.path)

    def _break_if_stale(self) -> bool:
        try:
            age = time.time() - self.path.stat().st_mtime
        except FileNotFoundError:
            return True
        if age <= self._stale_seconds:
            return False
        logger.warning("Breaking stale cache lock %s (age %.0fs)", self.path, age)
        with suppress(FileNotFoundError):
            self.path.unlink()
        return True

    def __enter__(self) -> KeyLock:
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
