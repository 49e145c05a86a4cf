"""End-to-end provisioning: cache, manifest, options, placeholders, plan, execute."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from stencil.cache import RepoCache
from stencil.config import StencilConfig
from stencil.constants.placeholders import PROJECT_NAME_TOKEN
from stencil.constants.validation import OPT003
from stencil.dry_run import DryRunEngine, DryRunPlan, build_plan
from stencil.exceptions import OptionsValidationError, ValidationIssue
from stencil.executor import ExecutionResult, Executor
from stencil.manifest import TemplateManifest, load_manifest, locate_template
from stencil.options import OptionsResult, normalize_options
from stencil.placeholders import (
    PlaceholderResolution,
    PlaceholderSources,
    Prompter,
    canonical_token,
    resolve_placeholders,
)
from stencil.setup import SetupContext
from stencil.utils.naming import sanitize_project_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionRequest:
    """Everything a caller decided about one provisioning run."""

    target_dir: Path
    template: str | None = None
    repo: str | None = None
    branch: str | None = None
    options: Sequence[str] = ()
    placeholders: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    prompt_answers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    ide: str | None = None
    dry_run: bool = False
    no_cache: bool = False
    ttl_override: float | None = None
    interactive: bool = False


@dataclass(frozen=True)
class ProvisionOutcome:
    plan: DryRunPlan
    options: OptionsResult
    placeholders: PlaceholderResolution
    execution: ExecutionResult | None = None
    warnings: tuple[str, ...] = ()


def provision(
    request: ProvisionRequest,
    *,
    config: StencilConfig,
    cache: RepoCache,
    prompter: Prompter | None = None,
    environ: Mapping[str, str] | None = None,
) -> ProvisionOutcome:
    """Create a project from a template, or plan it when ``request.dry_run`` is set.

    Dry runs never fetch: an uncached repository raises PreviewUnavailable.
    """
    locator = request.repo or config.repo
    branch = request.branch or config.branch
    target_dir = request.target_dir.expanduser().resolve()
    project_name = sanitize_project_name(target_dir.name)

    tree = _template_tree(request, cache, locator, branch)
    template_dir = locate_template(tree, request.template)
    manifest = load_manifest(template_dir)
    logger.info("Using template %s from %s", manifest.name, locator)

    options = normalize_options(request.options, manifest.dimensions)
    _reject_unknown_options(options)

    resolution = resolve_placeholders(
        manifest.placeholders,
        PlaceholderSources(
            flags=_with_project_name(request.placeholders, manifest, project_name),
            prompt_answers=request.prompt_answers,
            environment=os.environ if environ is None else environ,
            config=config.placeholders,
            interactive=request.interactive,
            prompter=prompter,
        ),
    )
    flagged = {canonical_token(key) or key.strip() for key in request.placeholders}
    undeclared = [
        f"Placeholder {token} is not declared by template {manifest.name}"
        for token in resolution.unknown_tokens
        if token in flagged
    ]
    for warning in undeclared:
        logger.warning(warning)
    warnings = [*options.warnings, *undeclared]

    if request.dry_run:
        plan = DryRunEngine(cache).plan(
            locator,
            branch,
            request.template,
            target_dir,
            options=options,
            placeholders=resolution.report,
            warnings=warnings,
            ttl_override=request.ttl_override,
        )
        return ProvisionOutcome(plan=plan, options=options, placeholders=resolution, warnings=tuple(warnings))

    plan = build_plan(
        template_dir,
        target_dir,
        manifest,
        options=options,
        placeholders=resolution.report,
        warnings=warnings,
    )
    context = SetupContext(
        project_name=project_name,
        project_dir=str(target_dir),
        options=MappingProxyType({name: options.selected(name) for name in manifest.dimensions}),
        ide=request.ide,
        author=MappingProxyType(
            {key: value for key, value in vars(config.author).items() if value is not None}
        ),
        inputs=resolution.values,
    )
    execution = Executor(config.setup).execute(plan, replacements=resolution.replacements(), context=context)
    warnings.extend(execution.warnings)
    logger.info("Created %s (%d operations)", target_dir, execution.operations_performed)
    return ProvisionOutcome(
        plan=plan,
        options=options,
        placeholders=resolution,
        execution=execution,
        warnings=tuple(warnings),
    )


def _template_tree(request: ProvisionRequest, cache: RepoCache, locator: str, branch: str | None) -> Path:
    if request.dry_run:
        return DryRunEngine(cache).cached_tree(
            locator, branch, no_cache=request.no_cache, ttl_override=request.ttl_override
        )
    return cache.ensure(locator, branch, no_cache=request.no_cache, ttl_override=request.ttl_override)


def _reject_unknown_options(options: OptionsResult) -> None:
    if not options.unknown:
        return
    raise OptionsValidationError(
        [
            ValidationIssue(
                code=OPT003,
                path="options",
                field=item,
                message=f'Unknown option "{item}"',
                hint="check the template's dimensions",
            )
            for item in options.unknown
        ]
    )


def _with_project_name(
    flags: Mapping[str, str],
    manifest: TemplateManifest,
    project_name: str,
) -> Mapping[str, str]:
    """Add PROJECT_NAME at flag precedence when the template declares it and the caller did not."""
    declared = {definition.token for definition in manifest.placeholders}
    supplied = {canonical_token(key) for key in flags}
    if PROJECT_NAME_TOKEN not in declared or PROJECT_NAME_TOKEN in supplied:
        return flags
    return MappingProxyType({**flags, PROJECT_NAME_TOKEN: project_name})
