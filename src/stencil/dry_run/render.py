"""Human-readable rendering of dry-run plans."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from stencil.constants.reporting import (
    ANSI_BOLD,
    ANSI_CYAN,
    ANSI_GREEN,
    ANSI_RESET,
    ANSI_YELLOW,
    CATEGORY_DIRECTORIES,
    CATEGORY_FILES,
    CATEGORY_SETUP,
    CATEGORY_UNKNOWN,
    PLAN_TITLE,
    UNKNOWN_OPERATION_LABEL,
)
from stencil.dry_run.operations import DirectoryCreate, FileCopy, SetupScript
from stencil.dry_run.planner import DryRunPlan


def _colorize(text: str, color: str, enabled: bool) -> str:
    return f"{color}{text}{ANSI_RESET}" if enabled else text


def _describe(operation: Any) -> tuple[str, str]:
    if isinstance(operation, DirectoryCreate):
        return CATEGORY_DIRECTORIES, f"mkdir  {operation.relative}/"
    if isinstance(operation, FileCopy):
        return CATEGORY_FILES, f"copy   {operation.relative}"
    if isinstance(operation, SetupScript):
        return CATEGORY_SETUP, f"setup  {operation.relative}"
    return CATEGORY_UNKNOWN, f"{UNKNOWN_OPERATION_LABEL}: {_safe_repr(operation)}"


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return f"<{type(value).__name__}>"


def render(plan_or_operations: DryRunPlan | Iterable[Any], *, color: bool = False) -> str:
    """Render a plan or bare operation list as text grouped by kind.

    Entries that are not recognized operations are listed as unknown instead
    of raising.
    """
    if isinstance(plan_or_operations, DryRunPlan):
        operations: list[Any] = list(plan_or_operations.operations)
        warnings = list(plan_or_operations.warnings)
        target = str(plan_or_operations.target_dir)
        report = list(plan_or_operations.placeholders)
    else:
        try:
            operations = list(plan_or_operations or ())
        except TypeError:
            operations = [plan_or_operations]
        warnings, target, report = [], None, []

    described = [_describe(operation) for operation in operations]
    counts = {category: 0 for category in (CATEGORY_DIRECTORIES, CATEGORY_FILES, CATEGORY_SETUP)}
    for category, _line in described:
        counts[category] = counts.get(category, 0) + 1

    lines = ["", f"  {_colorize(PLAN_TITLE, ANSI_BOLD, color)}"]
    if target:
        lines.append(f"  Target      {target}")
    lines.append("  " + "─" * 38)
    for category, count in counts.items():
        if category == CATEGORY_UNKNOWN and not count:
            continue
        lines.append(f"  {category:<24} {_colorize(str(count), ANSI_CYAN, color)}")

    lines.append("")
    for _category, line in described:
        lines.append(f"    {line}")

    if report:
        lines.append("")
        lines.append("  Placeholders")
        for entry in report:
            lines.append(f"    {entry.token} = {entry.display_value} ({_colorize(entry.source, ANSI_GREEN, color)})")

    if warnings:
        lines.append("")
        for warning in warnings:
            lines.append(f"  {_colorize('warning:', ANSI_YELLOW, color)} {warning}")
    lines.append("")
    return "\n".join(lines)
