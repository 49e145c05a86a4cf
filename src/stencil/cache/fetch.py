"""Repository fetchers that materialize a template tree into a staging directory."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from stencil.cache.keys import is_local_locator, local_locator_path
from stencil.constants.cache import FETCH_IGNORED_NAMES, FETCH_TIMEOUT_SECONDS
from stencil.exceptions import FetchError, FetchTimeout
from stencil.io import remove_tree

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Materializes ``url`` at ``branch`` into ``destination`` (which must not exist yet)."""

    def fetch(self, url: str, branch: str | None, destination: Path, *, timeout: float) -> None: ...


def _ignore_fetch_names(_dir_path: str, names: list[str]) -> set[str]:
    return {name for name in names if name in FETCH_IGNORED_NAMES}


class GitFetcher:
    """Shallow-clones remote repositories with ``git`` and copies local directories."""

    def __init__(self, git_executable: str = "git") -> None:
        self._git = git_executable

    def fetch(
        self,
        url: str,
        branch: str | None,
        destination: Path,
        *,
        timeout: float = FETCH_TIMEOUT_SECONDS,
    ) -> None:
        """Fetch ``url`` into ``destination``; on any failure nothing is left behind."""
        try:
            if is_local_locator(url):
                self._copy_local(local_locator_path(url), destination)
            else:
                self._clone(url, branch, destination, timeout=timeout)
        except BaseException:
            remove_tree(destination)
            raise
        remove_tree(destination / ".git")

    def _clone(self, url: str, branch: str | None, destination: Path, *, timeout: float) -> None:
        args = [self._git, "clone", "--depth", "1"]
        if branch:
            args.extend(["--branch", branch])
        args.extend([url, str(destination)])
        logger.info("Cloning %s%s", url, f" ({branch})" if branch else "")
        try:
            proc = subprocess.run(args, capture_output=True, text=True, check=False, timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            raise FetchTimeout(f"git clone of {url} timed out after {timeout:g}s") from exc
        except FileNotFoundError as exc:
            raise FetchError(f"git executable not found: {self._git}") from exc
        if proc.returncode == 0:
            return
        msg = proc.stderr.strip() or proc.stdout.strip()
        if not msg:
            msg = f"git clone failed (exit {proc.returncode})"
        raise FetchError(f"Failed to fetch {url}: {msg}")

    @staticmethod
    def _copy_local(source: Path, destination: Path) -> None:
        if not source.is_dir():
            raise FetchError(f"Local template repository not found: {source}")
        logger.info("Copying local template repository %s", source)
        shutil.copytree(source, destination, ignore=_ignore_fetch_names, symlinks=True)
