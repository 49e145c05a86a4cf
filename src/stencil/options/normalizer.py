"""Normalize raw option tokens against a template's declared dimensions."""

from __future__ import annotations

from typing import TypeAlias

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from stencil.constants.manifest import POLICY_STRICT, POLICY_WARN
from stencil.constants.options import ASSIGNMENT_SEPARATOR, MULTI_VALUE_SEPARATOR
from stencil.constants.validation import OPT001, OPT002, OPT004, OPT005, OPT006
from stencil.exceptions import OptionsValidationError, ValidationIssue
from stencil.manifest.model import Dimension, DimensionRef

logger = logging.getLogger(__name__)

Selection: TypeAlias = str | tuple[str, ...] | None


@dataclass(frozen=True)
class OptionsResult:
    """Validated selection per dimension plus non-fatal findings.

    Single-select dimensions map to a value or None; multi-select dimensions map
    to a sorted tuple, so the same selection always reads the same way.
    """

    by_dimension: Mapping[str, Selection]
    warnings: tuple[str, ...] = ()
    unknown: tuple[str, ...] = ()

    def selected(self, dimension: str) -> tuple[str, ...]:
        """Return the values chosen for ``dimension`` as a tuple."""
        value = self.by_dimension.get(dimension)
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value

    def pairs(self) -> list[DimensionRef]:
        """Return every selected ``(dimension, value)`` pair."""
        return [(name, value) for name in self.by_dimension for value in self.selected(name)]


def normalize_options(raw_tokens: Iterable[str], dimensions: Mapping[str, Dimension]) -> OptionsResult:
    """Apply option tokens to dimension defaults and enforce declared constraints.

    Raises OptionsValidationError listing every malformed token, arity violation,
    conflict, missing requirement, and gated value.
    """
    selection: dict[str, list[str]] = {name: list(dim.default) for name, dim in dimensions.items()}
    warnings: list[str] = []
    unknown: list[str] = []
    issues: list[ValidationIssue] = []
    catch_all = _catch_all_dimension(dimensions)

    for raw in raw_tokens:
        token = raw.strip()
        if not token:
            continue

        if ASSIGNMENT_SEPARATOR not in token:
            if catch_all is None:
                _append_unique(unknown, token)
            else:
                _append_unique(selection[catch_all.name], token)
            continue

        name, _sep, rest = token.partition(ASSIGNMENT_SEPARATOR)
        name = name.strip()
        rest = rest.strip()
        if not name:
            issues.append(_issue(OPT001, token, f'Option "{token}" is missing a dimension name'))
            continue
        if not rest:
            issues.append(_issue(OPT001, token, f'Option "{token}" is missing a value'))
            continue
        values = [value.strip() for value in rest.split(MULTI_VALUE_SEPARATOR) if value.strip()]
        if not values:
            issues.append(_issue(OPT001, token, f'Option "{token}" is missing a value'))
            continue

        dimension = dimensions.get(name)
        if dimension is None:
            _append_unique(unknown, token)
            continue
        if not dimension.is_multi and len(values) > 1:
            issues.append(
                _issue(
                    OPT002,
                    name,
                    f'Dimension "{name}" accepts a single value',
                    hint=f"got {'+'.join(values)}",
                )
            )
            continue

        for value in values:
            if not dimension.declares(value):
                if dimension.policy == POLICY_STRICT:
                    _append_unique(unknown, f"{name}={value}")
                    continue
                if dimension.policy == POLICY_WARN:
                    warnings.append(
                        f'Dimension "{name}" does not list value "{value}", but policy is "warn" so continuing.'
                    )
            if dimension.is_multi:
                _append_unique(selection[name], value)
            else:
                selection[name] = [value]

    if issues:
        raise OptionsValidationError(issues)

    result = OptionsResult(
        by_dimension=MappingProxyType(
            {
                name: tuple(sorted(selection[name])) if dim.is_multi else (selection[name][0] if selection[name] else None)
                for name, dim in dimensions.items()
            }
        ),
        warnings=tuple(warnings),
        unknown=tuple(unknown),
    )

    constraint_issues = check_constraints(result, dimensions)
    if constraint_issues:
        raise OptionsValidationError(constraint_issues)

    for warning in result.warnings:
        logger.warning(warning)
    return result


def check_constraints(result: OptionsResult, dimensions: Mapping[str, Dimension]) -> list[ValidationIssue]:
    """Return conflict, requires, and gate violations for a selection."""
    selected = set(result.pairs())
    issues: list[ValidationIssue] = []
    reported_conflicts: set[frozenset[DimensionRef]] = set()

    for name, value in result.pairs():
        dimension = dimensions[name]
        for ref in dimension.conflicts.get(value, ()):
            pair = frozenset({(name, value), ref})
            if ref in selected and pair not in reported_conflicts:
                reported_conflicts.add(pair)
                issues.append(
                    _issue(OPT004, name, f'"{_label(name, value)}" conflicts with "{_label(*ref)}"')
                )
        missing = [ref for ref in dimension.requires.get(value, ()) if ref not in selected]
        if missing:
            needed = ", ".join(f'"{_label(*ref)}"' for ref in missing)
            issues.append(_issue(OPT005, name, f'"{_label(name, value)}" requires {needed}'))
        if value in dimension.blocked:
            issues.append(
                _issue(
                    OPT006,
                    name,
                    f'Dimension "{name}" value "{value}" is not allowed: {dimension.blocked[value]}',
                )
            )
    return issues


def _catch_all_dimension(dimensions: Mapping[str, Dimension]) -> Dimension | None:
    """Return the first multi-select dimension with an unrestricted value set."""
    for dimension in dimensions.values():
        if dimension.is_multi and dimension.is_open:
            return dimension
    return None


def _append_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


def _label(name: str, value: str) -> str:
    return f"{name}={value}"


def _issue(code: str, field: str, message: str, *, hint: str = "") -> ValidationIssue:
    return ValidationIssue(code=code, path="options", field=field, message=message, hint=hint)


def split_option_args(values: Sequence[str]) -> list[str]:
    """Split comma-separated CLI option arguments into individual tokens."""
    tokens: list[str] = []
    for value in values:
        tokens.extend(part for part in value.split(",") if part.strip())
    return tokens
