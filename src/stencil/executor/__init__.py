"""Real materialization of dry-run plans."""

from __future__ import annotations

from stencil.executor.executor import ExecutionResult, Executor

__all__ = ["ExecutionResult", "Executor"]
