"""Shared pytest fixtures: a fake template repository, a frozen clock, and an isolated cache."""

from __future__ import annotations

import json
import shutil
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from stencil.cache import RepoCache

SETUP_SCRIPT = '''\
def setup(env):
    deployment = env.tools.options.selected("deployment")
    env.tools.text.append_lines("README.md", ["", "Deployment: " + deployment[0]])
'''

WEBAPP_MANIFEST = {
    "name": "webapp",
    "description": "Minimal web application",
    "dimensions": {
        "deployment": {"type": "single", "values": ["aws", "gcp", "vercel"], "default": "aws"},
        "features": {"type": "multi", "values": ["auth", "docs", "testing"], "default": ["docs"]},
    },
    "placeholders": {
        "PROJECT_NAME": {"required": True, "description": "Package name"},
        "AUTHOR": {"default": "Anonymous"},
    },
}


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeFetcher:
    """Copies a local directory instead of cloning; records every call."""

    def __init__(self, source: Path) -> None:
        self.source = source
        self.calls: list[tuple[str, str | None]] = []

    def fetch(self, url: str, branch: str | None, destination: Path, *, timeout: float) -> None:
        self.calls.append((url, branch))
        shutil.copytree(self.source, destination)


def write_template(root: Path, name: str, manifest: dict, files: dict[str, str]) -> Path:
    template_dir = root / name
    template_dir.mkdir(parents=True)
    (template_dir / "template.json").write_text(json.dumps(manifest), encoding="utf-8")
    for relative, content in files.items():
        path = template_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return template_dir


@pytest.fixture
def template_repo(tmp_path: Path) -> Path:
    """A repository tree holding one ``webapp`` template with a setup script."""
    root = tmp_path / "repo"
    write_template(
        root,
        "webapp",
        WEBAPP_MANIFEST,
        {
            "package.json": '{"name": "{{PROJECT_NAME}}", "author": "{{ AUTHOR }}"}\n',
            "README.md": "# {{PROJECT_NAME}}\n",
            "src/index.js": "console.log('{{PROJECT_NAME}}');\n",
            "_setup.py": SETUP_SCRIPT,
        },
    )
    return root


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def frozen_clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def fake_fetcher(template_repo: Path) -> FakeFetcher:
    return FakeFetcher(template_repo)


@pytest.fixture
def repo_cache(cache_root: Path, fake_fetcher: FakeFetcher, frozen_clock: FrozenClock) -> RepoCache:
    return RepoCache(cache_root, fetcher=fake_fetcher, clock=frozen_clock, lock_timeout=1.0)


@pytest.fixture
def make_template():
    """Return a helper that writes ``<root>/<name>/template.json`` plus files."""
    return write_template
