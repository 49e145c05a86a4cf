"""Locator normalization and cache-key derivation."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from stencil.constants.cache import CACHE_KEY_LENGTH, DEFAULT_BRANCH_KEY, GITHUB_URL_TEMPLATE
from stencil.exceptions import ConfigError

_SHORTHAND_PATTERN = re.compile(r"^(?P<owner>[A-Za-z0-9_.-]+)/(?P<name>[A-Za-z0-9_.-]+)$")
_SCP_PATTERN = re.compile(r"^[\w.-]+@(?P<host>[\w.-]+):(?P<path>[^\s]+)$")
_LOCAL_PREFIXES = ("/", "./", "../", "~")


def is_local_locator(locator: str) -> bool:
    """Return True when the locator names a directory on this machine."""
    stripped = locator.strip()
    return stripped.startswith("file://") or stripped.startswith(_LOCAL_PREFIXES)


def local_locator_path(locator: str) -> Path:
    """Resolve a local locator to an absolute directory path."""
    stripped = locator.strip()
    if stripped.startswith("file://"):
        stripped = urlsplit(stripped).path
    return Path(stripped).expanduser().resolve()


def fetch_url(locator: str) -> str:
    """Return the URL or path a fetcher should clone for ``locator``."""
    stripped = locator.strip().rstrip("/")
    if not stripped:
        raise ConfigError("Repository locator must be a non-empty string")
    if is_local_locator(stripped):
        return str(local_locator_path(stripped))
    shorthand = _SHORTHAND_PATTERN.match(stripped)
    if shorthand:
        name = shorthand.group("name").removesuffix(".git")
        return GITHUB_URL_TEMPLATE.format(owner=shorthand.group("owner"), name=name)
    return stripped


def normalize_locator(locator: str) -> str:
    """Canonicalize a repository locator so equivalent spellings compare equal.

    ``owner/name``, ``https://github.com/owner/name`` and ``git@github.com:owner/name.git``
    all normalize to ``https://github.com/owner/name.git``.
    """
    url = fetch_url(locator)
    if is_local_locator(url):
        return url

    scp = _SCP_PATTERN.match(url)
    if scp:
        url = f"https://{scp.group('host')}/{scp.group('path')}"

    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise ConfigError(f"Unsupported repository locator: {locator!r}")

    scheme = parts.scheme.lower()
    if scheme in {"ssh", "git", "git+ssh"}:
        scheme = "https"
    host = (parts.hostname or "").lower()
    if parts.port:
        host = f"{host}:{parts.port}"
    path = parts.path.rstrip("/").removesuffix(".git")
    if not path:
        raise ConfigError(f"Repository locator has no path: {locator!r}")
    return urlunsplit((scheme, host, f"{path}.git", "", ""))


def normalize_branch(branch: str | None) -> str:
    """Return the branch component of the cache key."""
    if branch is None or not branch.strip():
        return DEFAULT_BRANCH_KEY
    return branch.strip()


def cache_key(locator: str, branch: str | None) -> str:
    """Return the stable cache key for a repository and branch."""
    blob = f"{normalize_locator(locator)}#{normalize_branch(branch)}".encode("utf-8")
    return hashlib.sha256(blob).hexdigest()[:CACHE_KEY_LENGTH]
