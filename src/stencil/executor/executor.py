"""Perform a materialization plan on disk."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from stencil.config import SetupConfig
from stencil.constants.config import SETUP_ON_FAILURE_ABORT
from stencil.dry_run import DirectoryCreate, DryRunPlan, FileCopy, SetupScript
from stencil.exceptions import ConfigError, SetupTimeout
from stencil.io import remove_tree
from stencil.setup import SetupContext, SetupResult, build_tools, run_setup
from stencil.setup.tools import apply_replacements

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    operations_performed: int
    setup: SetupResult | None = None
    warnings: tuple[str, ...] = ()


class Executor:
    """Copies template files into a new project and runs its setup script."""

    def __init__(self, setup_config: SetupConfig | None = None) -> None:
        self._setup_config = setup_config or SetupConfig()

    def execute(
        self,
        plan: DryRunPlan,
        *,
        replacements: Mapping[str, str],
        context: SetupContext,
    ) -> ExecutionResult:
        """Perform ``plan`` in order.

        A non-empty target is refused. An interrupted copy or a setup timeout
        removes everything this run created. Other setup failures follow the
        configured on_failure policy: ``abort`` raises, ``warn`` records a warning.
        """
        target = plan.target_dir
        if target.exists() and (not target.is_dir() or any(target.iterdir())):
            raise ConfigError(f"Target directory {target} already exists and is not empty")
        created = not target.exists()
        target.mkdir(parents=True, exist_ok=True)

        performed = 0
        script_op: SetupScript | None = None
        try:
            for operation in plan.operations:
                if isinstance(operation, DirectoryCreate):
                    operation.path.mkdir(parents=True, exist_ok=True)
                elif isinstance(operation, FileCopy):
                    _copy_file(operation.source, operation.destination, replacements)
                elif isinstance(operation, SetupScript):
                    operation.path.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(operation.source, operation.path)
                    script_op = operation
                performed += 1
        except BaseException:
            logger.warning("Copy into %s was interrupted; removing partial output", target)
            _discard(target, created)
            raise

        if script_op is None:
            return ExecutionResult(operations_performed=performed)

        tools = build_tools(target, context)
        result = run_setup(script_op.path, context, tools, timeout=self._setup_config.timeout_seconds)
        if result.success:
            script_op.path.unlink(missing_ok=True)
            return ExecutionResult(operations_performed=performed, setup=result)

        assert result.error is not None
        if isinstance(result.error, SetupTimeout):
            _discard(target, created)
            raise result.error
        if self._setup_config.on_failure == SETUP_ON_FAILURE_ABORT:
            raise result.error

        warning = str(result.error)
        logger.warning(warning)
        return ExecutionResult(operations_performed=performed, setup=result, warnings=(warning,))


def _copy_file(source: Path, destination: Path, replacements: Mapping[str, str]) -> None:
    """Copy one file, substituting placeholders when it decodes as UTF-8."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    data = source.read_bytes()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        destination.write_bytes(data)
    else:
        destination.write_bytes(apply_replacements(text, replacements).encode("utf-8") if replacements else data)
    shutil.copymode(source, destination)


def _discard(target: Path, created: bool) -> None:
    if created:
        remove_tree(target)
        return
    for child in target.iterdir():
        remove_tree(child)
