"""End-to-end provisioning tests against a fake repository fetcher."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from stencil.cache import RepoCache
from stencil.config import AuthorConfig, SetupConfig, StencilConfig
from stencil.exceptions import MissingRequiredError, OptionsValidationError, PreviewUnavailable
from stencil.pipeline import ProvisionRequest, provision
from stencil.manifest import PlaceholderDefinition

LOCATOR = "acme/templates"


@pytest.fixture
def config() -> StencilConfig:
    return StencilConfig(repo=LOCATOR, author=AuthorConfig(name="Ada"))


def test_provision_creates_project(config: StencilConfig, repo_cache: RepoCache, fake_fetcher, tmp_path: Path) -> None:
    target = tmp_path / "My App"

    outcome = provision(
        ProvisionRequest(target_dir=target, template="webapp", options=["deployment=vercel", "features=auth"]),
        config=config,
        cache=repo_cache,
        environ={},
    )

    assert fake_fetcher.calls == [("https://github.com/acme/templates.git", None)]
    assert outcome.execution is not None
    assert outcome.execution.setup is not None and outcome.execution.setup.success
    assert outcome.options.selected("features") == ("auth", "docs")
    assert outcome.placeholders.values["PROJECT_NAME"] == "my-app"
    assert outcome.placeholders.source_of("PROJECT_NAME") == "flag"
    assert outcome.placeholders.source_of("AUTHOR") == "default"
    assert json.loads((target / "package.json").read_text(encoding="utf-8")) == {
        "name": "my-app",
        "author": "Anonymous",
    }
    assert (target / "README.md").read_text(encoding="utf-8").endswith("Deployment: vercel\n")
    assert outcome.warnings == ()


def test_placeholder_precedence(repo_cache: RepoCache, tmp_path: Path) -> None:
    config = StencilConfig(repo=LOCATOR, placeholders={"AUTHOR": "From Config"})
    target = tmp_path / "app"

    outcome = provision(
        ProvisionRequest(target_dir=target, placeholders={"project_name": "custom"}),
        config=config,
        cache=repo_cache,
        environ={"STENCIL_PLACEHOLDER_AUTHOR": "From Env"},
    )

    assert outcome.placeholders.values == {"PROJECT_NAME": "custom", "AUTHOR": "From Env"}
    assert outcome.placeholders.source_of("AUTHOR") == "environment"


def test_undeclared_flag_placeholder_warns(config: StencilConfig, repo_cache: RepoCache, tmp_path: Path) -> None:
    outcome = provision(
        ProvisionRequest(target_dir=tmp_path / "app", placeholders={"LICENSE": "MIT"}),
        config=config,
        cache=repo_cache,
        environ={},
    )

    assert outcome.warnings == ("Placeholder LICENSE is not declared by template webapp",)


def test_unknown_options_abort_before_writing(config: StencilConfig, repo_cache: RepoCache, tmp_path: Path) -> None:
    target = tmp_path / "app"

    with pytest.raises(OptionsValidationError) as exc_info:
        provision(
            ProvisionRequest(target_dir=target, options=["kubernetes", "region=eu"]),
            config=config,
            cache=repo_cache,
            environ={},
        )

    assert [issue.code for issue in exc_info.value.errors] == ["OPT003", "OPT003"]
    assert {issue.field for issue in exc_info.value.errors} == {"kubernetes", "region=eu"}
    assert not target.exists()


def test_missing_required_placeholder(make_template, tmp_path: Path) -> None:
    repo = tmp_path / "other-repo"
    make_template(
        repo,
        "service",
        {"placeholders": {"API_URL": {"required": True}, "PORT": {"type": "number", "required": True}}},
        {"config.txt": "{{API_URL}}:{{PORT}}"},
    )
    config = StencilConfig(repo=str(repo))
    cache = RepoCache(tmp_path / "local-cache")

    with pytest.raises(MissingRequiredError) as exc_info:
        provision(ProvisionRequest(target_dir=tmp_path / "svc"), config=config, cache=cache, environ={})

    assert exc_info.value.tokens == ["API_URL", "PORT"]
    assert not (tmp_path / "svc").exists()


def test_prompter_fills_required_placeholders(make_template, tmp_path: Path) -> None:
    repo = tmp_path / "other-repo"
    make_template(
        repo,
        "service",
        {"placeholders": {"API_URL": {"required": True}}},
        {"config.txt": "url={{API_URL}}"},
    )
    asked: list[str] = []

    def prompter(definition: PlaceholderDefinition) -> str:
        asked.append(definition.token)
        return "https://api.example.com"

    provision(
        ProvisionRequest(target_dir=tmp_path / "svc", interactive=True),
        config=StencilConfig(repo=str(repo)),
        cache=RepoCache(tmp_path / "local-cache"),
        prompter=prompter,
        environ={},
    )

    assert asked == ["API_URL"]
    assert (tmp_path / "svc" / "config.txt").read_text(encoding="utf-8") == "url=https://api.example.com"


def test_dry_run_uses_cache_only(config: StencilConfig, repo_cache: RepoCache, fake_fetcher, tmp_path: Path) -> None:
    target = tmp_path / "preview"

    with pytest.raises(PreviewUnavailable):
        provision(ProvisionRequest(target_dir=target, dry_run=True), config=config, cache=repo_cache, environ={})
    assert fake_fetcher.calls == []

    repo_cache.ensure(LOCATOR, None)
    outcome = provision(
        ProvisionRequest(target_dir=target, dry_run=True),
        config=config,
        cache=repo_cache,
        environ={},
    )

    assert outcome.execution is None
    assert len(outcome.plan.files) == 3
    assert outcome.plan.setup_script is not None
    assert [entry.token for entry in outcome.plan.placeholders] == ["PROJECT_NAME", "AUTHOR"]
    assert not target.exists()
    assert len(fake_fetcher.calls) == 1


def test_setup_failure_is_reported_as_warning(make_template, tmp_path: Path) -> None:
    repo = tmp_path / "broken-repo"
    make_template(repo, "broken", {}, {"a.txt": "a", "_setup.py": "def setup(env):\n    raise ValueError('nope')\n"})
    config = StencilConfig(repo=str(repo), setup=SetupConfig(on_failure="warn"))

    outcome = provision(
        ProvisionRequest(target_dir=tmp_path / "proj"),
        config=config,
        cache=RepoCache(tmp_path / "local-cache"),
        environ={},
    )

    assert outcome.execution is not None
    assert outcome.execution.setup is not None and not outcome.execution.setup.success
    assert any("ValueError: nope" in warning for warning in outcome.warnings)
    assert (tmp_path / "proj" / "a.txt").read_text(encoding="utf-8") == "a"
