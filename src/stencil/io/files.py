"""Directory-level helpers for sizing and best-effort removal."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def directory_size(path: Path) -> int:
    """Return the total byte size of regular files below ``path``."""
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for filename in filenames:
            try:
                total += (Path(dirpath) / filename).lstat().st_size
            except OSError:
                continue
    return total


def remove_tree(path: Path) -> bool:
    """Remove a file or directory tree, tolerating entries that are already gone.

    Returns True when nothing remains at ``path`` afterwards.
    """
    if path.is_symlink() or path.is_file():
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Failed to remove %s: %s", path, exc)
    elif path.exists():
        shutil.rmtree(path, ignore_errors=True)
    return not path.exists()
