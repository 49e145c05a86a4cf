"""Dry-run planning and rendering."""

from __future__ import annotations

from stencil.dry_run.operations import DirectoryCreate, FileCopy, Operation, SetupScript, enumerate_operations
from stencil.dry_run.planner import DryRunEngine, DryRunPlan, build_plan
from stencil.dry_run.render import render

__all__ = [
    "DirectoryCreate",
    "DryRunEngine",
    "DryRunPlan",
    "FileCopy",
    "Operation",
    "SetupScript",
    "build_plan",
    "enumerate_operations",
    "render",
]
