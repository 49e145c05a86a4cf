"""Static policy lint for setup scripts.

The guard walks the script's AST before anything runs and rejects imports,
dynamic evaluation, module loading, and private or dunder attribute access. It is
a best-effort policy check, not an isolation boundary: a determined author can
still find ways around it, so only run templates from sources you trust. The
runtime's timeout is best effort in the same way, since a script can keep
running in a ``finally`` block after it is interrupted.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass

from stencil.constants.sandbox import (
    FORBIDDEN_ATTRIBUTE_NAMES,
    FORBIDDEN_CALL_NAMES,
    FORBIDDEN_NAMES,
)
from stencil.exceptions import SandboxViolation, SetupFailure


@dataclass(frozen=True)
class GuardFinding:
    """A single prohibited construct."""

    line: int
    message: str

    def format(self) -> str:
        return f"line {self.line}: {self.message}"


class _PolicyVisitor(ast.NodeVisitor):
    def __init__(self) -> None:
        self.findings: list[GuardFinding] = []

    def _flag(self, node: ast.AST, message: str) -> None:
        self.findings.append(GuardFinding(line=getattr(node, "lineno", 0), message=message))

    def visit_Import(self, node: ast.Import) -> None:
        self._flag(node, "Import is disabled inside setup scripts. Use the provided tools instead.")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        self._flag(node, "Import is disabled inside setup scripts. Use the provided tools instead.")

    def visit_Call(self, node: ast.Call) -> None:
        if isinstance(node.func, ast.Name) and node.func.id in FORBIDDEN_CALL_NAMES:
            self._flag(node, f"{node.func.id}() is disabled inside setup scripts.")
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if node.id in FORBIDDEN_NAMES:
            self._flag(node, f"Access to {node.id} is disabled inside setup scripts.")

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if node.attr.startswith("_"):
            self._flag(node, f"Private attribute access ({node.attr}) is disabled inside setup scripts.")
        elif node.attr in FORBIDDEN_ATTRIBUTE_NAMES:
            self._flag(node, f"{node.attr} is disabled inside setup scripts.")
        self.generic_visit(node)

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.type is None:
            self._flag(node, "Bare except clauses are not allowed in setup scripts.")
        self.generic_visit(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._flag(node, "Async functions are not supported in setup scripts.")
        self.generic_visit(node)


def scan_source(source: str, filename: str = "<setup>") -> tuple[ast.Module, list[GuardFinding]]:
    """Parse a script and return its AST plus every policy finding.

    Raises SetupFailure when the script is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as exc:
        raise SetupFailure(f"Setup script {filename} has a syntax error on line {exc.lineno}: {exc.msg}") from exc
    visitor = _PolicyVisitor()
    visitor.visit(tree)
    return tree, sorted(visitor.findings, key=lambda finding: finding.line)


def check_source(source: str, filename: str = "<setup>") -> ast.Module:
    """Return the parsed script, raising SandboxViolation if any construct is prohibited."""
    tree, findings = scan_source(source, filename)
    if findings:
        details = "\n".join(f"  {finding.format()}" for finding in findings)
        raise SandboxViolation(f"Setup script {filename} violates the sandbox policy:\n{details}")
    return tree
