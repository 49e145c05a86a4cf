"""Structured validation issues and the aggregated errors that carry them."""

from __future__ import annotations

from dataclasses import dataclass

from stencil.exceptions.base import StencilError


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation issue with stable code and location context."""

    code: str
    path: str
    field: str
    message: str
    hint: str = ""

    def format(self) -> str:
        """Format as a human-readable single-line message."""
        parts = [f"[{self.code}]", self.path, self.message]
        if self.hint:
            parts.append(f"({self.hint})")
        return " ".join(parts)


def sort_issues(issues: list[ValidationIssue]) -> list[ValidationIssue]:
    """Sort validation issues deterministically by code, path, field."""
    return sorted(issues, key=lambda e: (e.code, e.path, e.field))


def format_issues(issues: list[ValidationIssue]) -> str:
    """Format a list of validation issues as a multi-line string."""
    return "\n".join(issue.format() for issue in sort_issues(issues))


class AggregateValidationError(StencilError, ValueError):
    """Raised once with every offending item enumerated."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.errors: list[ValidationIssue] = sort_issues(issues)
        super().__init__(format_issues(self.errors))


class OptionsValidationError(AggregateValidationError):
    """Raised when option tokens violate the template's dimension rules."""


class PlaceholderValidationError(AggregateValidationError):
    """Raised when supplied placeholder values fail type coercion or required values are missing."""

    @property
    def tokens(self) -> list[str]:
        """Offending placeholder tokens in sorted order."""
        return [issue.field for issue in self.errors]


class MissingRequiredError(PlaceholderValidationError):
    """Raised when required placeholders remain unset and prompting is unavailable."""
