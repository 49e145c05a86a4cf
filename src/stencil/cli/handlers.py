"""CLI subcommand handlers."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, datetime

from stencil.cache import RepoCache
from stencil.cli.prompts import prompt_placeholder
from stencil.config import StencilConfig, load_config
from stencil.dry_run import render
from stencil.exceptions import ConfigError
from stencil.options import split_option_args
from stencil.pipeline import ProvisionRequest, provision
from stencil.placeholders import canonical_token

logger = logging.getLogger(__name__)


def open_cache(config: StencilConfig) -> RepoCache:
    return RepoCache(config.cache.dir, ttl_hours=config.cache.ttl_hours)


def parse_placeholder_args(values: list[str]) -> dict[str, str]:
    """Turn repeated ``TOKEN=VALUE`` arguments into a mapping."""
    placeholders: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition("=")
        token = canonical_token(name)
        if not sep or token is None:
            raise ConfigError(f"--placeholder expects TOKEN=VALUE, got {raw!r}")
        placeholders[token] = value
    return placeholders


def handle_new(args: argparse.Namespace) -> int:
    """Create (or preview) a project from a template."""
    config = load_config(args.config)
    interactive = not args.no_input and sys.stdin.isatty()
    request = ProvisionRequest(
        target_dir=args.target,
        template=args.template,
        repo=args.repo,
        branch=args.branch,
        options=split_option_args(args.options),
        placeholders=parse_placeholder_args(args.placeholder),
        ide=args.ide,
        dry_run=args.dry_run,
        no_cache=args.no_cache,
        ttl_override=args.cache_ttl,
        interactive=interactive,
    )
    outcome = provision(
        request,
        config=config,
        cache=open_cache(config),
        prompter=prompt_placeholder if interactive else None,
    )

    if args.dry_run:
        use_color = not args.no_color and sys.stdout.isatty()
        print(render(outcome.plan, color=use_color))
        return 0

    execution = outcome.execution
    if execution is not None and execution.setup is not None and not execution.setup.success:
        return 1
    print(f"Created {outcome.plan.target_dir}")
    return 0


def handle_cache(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    cache = open_cache(config)

    if args.cache_command == "gc":
        removed = cache.gc(ttl_override=args.ttl)
        print(f"Removed {removed} cache entr{'y' if removed == 1 else 'ies'}")
        return 0
    if args.cache_command == "clear":
        removed = cache.clear()
        print(f"Cleared {removed} cache entr{'y' if removed == 1 else 'ies'}")
        return 0

    entries = cache.list_entries()
    if not entries:
        print("Cache is empty")
        return 0
    now = datetime.now(UTC)
    for entry in entries:
        status = "stale" if entry.is_stale(now) else "fresh"
        print(
            f"{entry.key}  {entry.repo_url}#{entry.branch or 'default'}  "
            f"{entry.template_count} templates  {entry.size_bytes} bytes  {status}"
        )
    return 0
