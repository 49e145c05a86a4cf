"""Side-effect-free materialization planning."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from stencil.cache import CacheMiss, RepoCache
from stencil.dry_run.operations import DirectoryCreate, FileCopy, Operation, SetupScript, enumerate_operations
from stencil.exceptions import PreviewUnavailable
from stencil.manifest import TemplateManifest, load_manifest, locate_template
from stencil.options import OptionsResult
from stencil.placeholders import ReportEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DryRunPlan:
    """The ordered operations a real run would perform, plus what fed them."""

    operations: tuple[Operation, ...]
    template_dir: Path
    target_dir: Path
    manifest: TemplateManifest
    options: OptionsResult | None = None
    placeholders: tuple[ReportEntry, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def directories(self) -> list[DirectoryCreate]:
        return [op for op in self.operations if isinstance(op, DirectoryCreate)]

    @property
    def files(self) -> list[FileCopy]:
        return [op for op in self.operations if isinstance(op, FileCopy)]

    @property
    def setup_script(self) -> SetupScript | None:
        return next((op for op in self.operations if isinstance(op, SetupScript)), None)


class DryRunEngine:
    """Builds plans from the cache without fetching anything."""

    def __init__(self, cache: RepoCache) -> None:
        self._cache = cache

    def plan(
        self,
        locator: str,
        branch: str | None,
        template_name: str | None,
        target_dir: Path,
        *,
        options: OptionsResult | None = None,
        placeholders: Sequence[ReportEntry] = (),
        warnings: Sequence[str] = (),
        ttl_override: float | None = None,
    ) -> DryRunPlan:
        """Plan the materialization of a cached template.

        Raises PreviewUnavailable when the repository is absent, stale, or
        corrupted in the cache.
        """
        template_dir = locate_template(self.cached_tree(locator, branch, ttl_override=ttl_override), template_name)
        return build_plan(
            template_dir,
            target_dir,
            load_manifest(template_dir),
            options=options,
            placeholders=placeholders,
            warnings=warnings,
        )

    def cached_tree(
        self,
        locator: str,
        branch: str | None,
        *,
        no_cache: bool = False,
        ttl_override: float | None = None,
    ) -> Path:
        """Return the cached repository tree, raising PreviewUnavailable on any miss."""
        resolved = self._cache.resolve(locator, branch, no_cache=no_cache, ttl_override=ttl_override)
        if isinstance(resolved, CacheMiss):
            raise PreviewUnavailable(
                f"{locator} ({branch or 'default branch'}) is not cached ({resolved.reason}); "
                "run without --dry-run once to fetch it"
            )
        return resolved


def build_plan(
    template_dir: Path,
    target_dir: Path,
    manifest: TemplateManifest,
    *,
    options: OptionsResult | None = None,
    placeholders: Sequence[ReportEntry] = (),
    warnings: Sequence[str] = (),
) -> DryRunPlan:
    """Enumerate operations for an already located template."""
    target_dir = target_dir.expanduser().resolve()
    operations = enumerate_operations(template_dir, target_dir, manifest)
    logger.debug("Planned %d operations for %s", len(operations), template_dir)
    return DryRunPlan(
        operations=tuple(operations),
        template_dir=template_dir,
        target_dir=target_dir,
        manifest=manifest,
        options=options,
        placeholders=tuple(placeholders),
        warnings=tuple(warnings),
    )
