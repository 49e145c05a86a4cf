"""Resolve placeholder values from ranked sources with provenance."""

from __future__ import annotations

from typing import TypeAlias

import logging
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from stencil.constants.config import PLACEHOLDER_ENV_PREFIX
from stencil.constants.placeholders import (
    BRACED_TOKEN_PATTERN,
    REDACTED_VALUE,
    SOURCE_CONFIG,
    SOURCE_DEFAULT,
    SOURCE_ENVIRONMENT,
    SOURCE_FLAG,
    SOURCE_PROMPT,
    TOKEN_PATTERN,
)
from stencil.constants.validation import PH001, PH002
from stencil.exceptions import MissingRequiredError, PlaceholderValidationError, ValidationIssue
from stencil.manifest.model import PlaceholderDefinition
from stencil.placeholders.coercion import coerce_value, format_value
from stencil.types import PlaceholderValue, ValueSource

logger = logging.getLogger(__name__)

Prompter: TypeAlias = Callable[[PlaceholderDefinition], str | None]


def _empty() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True)
class PlaceholderSources:
    """Raw placeholder inputs, highest precedence first.

    ``prompt_answers`` holds answers collected before resolution; ``prompter`` is
    asked only for required tokens that no source supplied, and only when
    ``interactive`` is set.
    """

    flags: Mapping[str, str] = field(default_factory=_empty)
    prompt_answers: Mapping[str, str] = field(default_factory=_empty)
    environment: Mapping[str, str] | None = None
    config: Mapping[str, str] = field(default_factory=_empty)
    interactive: bool = False
    prompter: Prompter | None = None


@dataclass(frozen=True)
class ReportEntry:
    """One line of the resolution audit trail. Sensitive values are redacted."""

    token: str
    source: ValueSource
    display_value: str


@dataclass(frozen=True)
class PlaceholderResolution:
    """Final placeholder values, their provenance, and undeclared inputs."""

    values: Mapping[str, PlaceholderValue]
    report: tuple[ReportEntry, ...] = ()
    unknown_tokens: tuple[str, ...] = ()

    def source_of(self, token: str) -> ValueSource | None:
        for entry in self.report:
            if entry.token == token:
                return entry.source
        return None

    def replacements(self) -> dict[str, str]:
        """Return values rendered as substitution text."""
        return {token: format_value(value) for token, value in self.values.items()}


def canonical_token(raw: str) -> str | None:
    """Return the uppercase token for ``name``, ``NAME`` or ``{{NAME}}``, or None if invalid."""
    stripped = raw.strip()
    braced = BRACED_TOKEN_PATTERN.match(stripped)
    if braced:
        stripped = braced.group(1)
    token = stripped.upper()
    return token if TOKEN_PATTERN.match(token) else None


def environment_values(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Extract ``STENCIL_PLACEHOLDER_<TOKEN>`` overrides from the environment."""
    source = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for key, value in source.items():
        if key.startswith(PLACEHOLDER_ENV_PREFIX) and len(key) > len(PLACEHOLDER_ENV_PREFIX):
            values[key[len(PLACEHOLDER_ENV_PREFIX) :]] = value
    return values


def resolve_placeholders(
    definitions: Iterable[PlaceholderDefinition],
    sources: PlaceholderSources,
) -> PlaceholderResolution:
    """Resolve every declared placeholder from ``sources``.

    Raises MissingRequiredError naming every required token left unset, or
    PlaceholderValidationError when a supplied value fails its type.
    """
    definitions = tuple(definitions)
    declared = {definition.token for definition in definitions}
    flags = _canonical_mapping(sources.flags)
    prompts = _canonical_mapping(sources.prompt_answers)
    config = _canonical_mapping(sources.config)
    environment = _canonical_mapping(environment_values(sources.environment))
    ranked: list[tuple[ValueSource, Mapping[str, str]]] = [
        (SOURCE_FLAG, flags),
        (SOURCE_PROMPT, prompts),
        (SOURCE_ENVIRONMENT, environment),
        (SOURCE_CONFIG, config),
    ]

    values: dict[str, PlaceholderValue] = {}
    report: list[ReportEntry] = []
    issues: list[ValidationIssue] = []

    for definition in definitions:
        token = definition.token
        source: ValueSource | None = None
        raw: str | None = None
        for source_name, mapping in ranked:
            candidate = mapping.get(token)
            if candidate is not None and candidate.strip():
                source, raw = source_name, candidate
                break

        if source is None and definition.required and sources.interactive and sources.prompter is not None:
            answer = sources.prompter(definition)
            if answer is not None and answer.strip():
                source, raw = SOURCE_PROMPT, answer

        if source is not None and raw is not None:
            try:
                value = coerce_value(raw, definition.type)
            except ValueError as exc:
                issues.append(
                    ValidationIssue(
                        code=PH002,
                        path="placeholders",
                        field=token,
                        message=f"Placeholder {token} from {source} is invalid: {exc}",
                        hint=f"expected {definition.type}",
                    )
                )
                continue
        elif definition.default is not None:
            source, value = SOURCE_DEFAULT, definition.default
        elif definition.required:
            issues.append(
                ValidationIssue(
                    code=PH001,
                    path="placeholders",
                    field=token,
                    message=f"Missing required placeholder {token}",
                    hint=definition.description or "",
                )
            )
            continue
        else:
            continue

        values[token] = value
        display = REDACTED_VALUE if definition.sensitive else format_value(value)
        report.append(ReportEntry(token=token, source=source, display_value=display))
        logger.debug("Placeholder %s resolved from %s", token, source)

    if issues:
        if all(issue.code == PH001 for issue in issues):
            raise MissingRequiredError(issues)
        raise PlaceholderValidationError(issues)

    unknown: list[str] = []
    for raw_key in [*sources.flags, *sources.config]:
        token = canonical_token(raw_key) or raw_key.strip()
        if token not in declared and token not in unknown:
            unknown.append(token)
    if unknown:
        logger.debug("Undeclared placeholder inputs: %s", ", ".join(unknown))

    return PlaceholderResolution(
        values=MappingProxyType(values),
        report=tuple(report),
        unknown_tokens=tuple(unknown),
    )


def _canonical_mapping(raw: Mapping[str, str]) -> dict[str, str]:
    canonical: dict[str, str] = {}
    for key, value in raw.items():
        token = canonical_token(key)
        if token is not None and token not in canonical:
            canonical[token] = value
    return canonical
