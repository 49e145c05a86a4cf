"""Materialization operations and deterministic template enumeration."""

from __future__ import annotations

from typing import TypeAlias

from dataclasses import dataclass
from pathlib import Path

from stencil.constants.manifest import MANIFEST_FILENAME
from stencil.constants.templates import TEMPLATE_IGNORED_NAMES
from stencil.manifest.model import TemplateManifest


@dataclass(frozen=True)
class DirectoryCreate:
    relative: str
    path: Path


@dataclass(frozen=True)
class FileCopy:
    relative: str
    source: Path
    destination: Path


@dataclass(frozen=True)
class SetupScript:
    """Copy the setup script into the project, run it, and delete it on success."""

    relative: str
    source: Path
    path: Path


Operation: TypeAlias = DirectoryCreate | FileCopy | SetupScript


def enumerate_operations(template_dir: Path, target_dir: Path, manifest: TemplateManifest) -> list[Operation]:
    """List the operations that materialize ``template_dir`` into ``target_dir``.

    Files at each level come first, then each subdirectory's DirectoryCreate
    followed by its contents, all in sorted name order. The manifest, the setup
    script, ignored names and symlinks are skipped. A SetupScript operation is
    appended last when the manifest names a script.
    """
    skipped = {MANIFEST_FILENAME}
    if manifest.setup_script:
        skipped.add(manifest.setup_script)

    operations: list[Operation] = []
    _walk(template_dir, template_dir, target_dir, skipped, operations)

    if manifest.setup_script:
        operations.append(
            SetupScript(
                relative=manifest.setup_script,
                source=template_dir / manifest.setup_script,
                path=target_dir / manifest.setup_script,
            )
        )
    return operations


def _walk(
    current: Path,
    template_dir: Path,
    target_dir: Path,
    skipped: set[str],
    operations: list[Operation],
) -> None:
    children = sorted(
        (child for child in current.iterdir() if child.name not in TEMPLATE_IGNORED_NAMES and not child.is_symlink()),
        key=lambda child: child.name,
    )
    directories: list[Path] = []
    for child in children:
        relative = child.relative_to(template_dir).as_posix()
        if child.is_dir():
            directories.append(child)
        elif child.is_file() and relative not in skipped:
            operations.append(FileCopy(relative=relative, source=child, destination=target_dir / relative))

    for directory in directories:
        relative = directory.relative_to(template_dir).as_posix()
        operations.append(DirectoryCreate(relative=relative, path=target_dir / relative))
        _walk(directory, template_dir, target_dir, skipped, operations)
