"""Adapt the flat and options-with-gates manifest shapes into the canonical model.

Flat form::

    "deployment": {"type": "single", "values": ["aws", "gcp"], "default": "aws",
                   "requires": {"aws": ["database=postgres"]}, "policy": "strict"}

Options form::

    "deployment": {"selection": "single", "options": [{"id": "aws"}, {"id": "gcp"}]}
    "gates": {"deployment": {"constraint": "Only AWS", "forbidden": ["gcp"]}}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from stencil.constants.manifest import (
    DIMENSION_NAME_PATTERN,
    DIMENSION_VALUE_PATTERN,
    MAX_DIMENSION_VALUE_LENGTH,
    REFERENCE_SEPARATOR,
    SELECTION_SINGLE,
    VALID_POLICIES,
    VALID_SELECTIONS,
)
from stencil.constants.placeholders import (
    BRACED_TOKEN_PATTERN,
    TOKEN_PATTERN,
    TYPE_PASSWORD,
    TYPE_TEXT,
    VALID_PLACEHOLDER_TYPES,
)
from stencil.exceptions import ManifestError
from stencil.manifest.model import Dimension, DimensionRef, PlaceholderDefinition
from stencil.placeholders.coercion import coerce_value


@dataclass
class _DraftDimension:
    name: str
    selection: str
    values: tuple[str, ...]
    default: tuple[str, ...]
    policy: str | None
    description: str | None
    raw_requires: Any = None
    raw_conflicts: Any = None
    blocked: dict[str, str] = field(default_factory=dict)


def adapt_dimensions(
    raw: Any,
    *,
    gates: Any = None,
    default_policy: str | None = None,
) -> Mapping[str, Dimension]:
    """Return canonical dimensions keyed by name, in declaration order."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ManifestError("dimensions must be an object")
    if default_policy is not None:
        default_policy = _normalize_policy(default_policy, "setup.policy")

    drafts: dict[str, _DraftDimension] = {}
    for name, definition in raw.items():
        if not isinstance(name, str) or not DIMENSION_NAME_PATTERN.match(name):
            raise ManifestError(
                f'Invalid dimension name "{name}". Dimension names must start with a lowercase letter '
                "and contain only lowercase letters, numbers, hyphens, or underscores (max 50 characters)."
            )
        if not isinstance(definition, dict):
            raise ManifestError(f'Dimension "{name}" must be an object')
        drafts[name] = _draft_dimension(name, definition, default_policy)

    _apply_gates(drafts, gates)

    dimensions: dict[str, Dimension] = {}
    for name, draft in drafts.items():
        dimensions[name] = Dimension(
            name=name,
            selection=draft.selection,  # type: ignore[arg-type]
            values=draft.values,
            default=draft.default,
            requires=_resolve_references(draft, draft.raw_requires, "requires", drafts),
            conflicts=_resolve_references(draft, draft.raw_conflicts, "conflicts", drafts),
            blocked=MappingProxyType(dict(draft.blocked)),
            policy=draft.policy,  # type: ignore[arg-type]
            description=draft.description,
        )
    return MappingProxyType(dimensions)


def _draft_dimension(name: str, definition: dict[str, Any], default_policy: str | None) -> _DraftDimension:
    if "options" in definition:
        selection = definition.get("selection", definition.get("type", SELECTION_SINGLE))
        values = _option_ids(name, definition["options"])
    else:
        selection = definition.get("type", definition.get("selection"))
        values = _values(name, definition.get("values", []))
    if selection not in VALID_SELECTIONS:
        raise ManifestError(f'Dimension "{name}" must declare type "single" or "multi"')

    policy = default_policy
    if definition.get("policy") is not None:
        policy = _normalize_policy(definition["policy"], f'Dimension "{name}" policy')

    description = definition.get("description")
    if not isinstance(description, str) or not description.strip():
        description = None

    draft = _DraftDimension(
        name=name,
        selection=selection,
        values=values,
        default=(),
        policy=policy,
        description=description.strip() if description else None,
        raw_requires=definition.get("requires"),
        raw_conflicts=definition.get("conflicts"),
    )
    draft.default = _default(draft, definition.get("default"))
    return draft


def _values(name: str, raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        raise ManifestError(f'Dimension "{name}" values must be an array')
    values: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise ManifestError(f'Dimension "{name}" values must be strings')
        value = _checked_value(name, item)
        if value not in values:
            values.append(value)
    return tuple(values)


def _option_ids(name: str, raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        raise ManifestError(f'Dimension "{name}" options must be an array')
    ids: list[str] = []
    for option in raw:
        option_id = option.get("id") if isinstance(option, dict) else option
        if not isinstance(option_id, str):
            raise ManifestError(f'Dimension "{name}" options must be strings or objects with a string "id"')
        value = _checked_value(name, option_id)
        if value not in ids:
            ids.append(value)
    return tuple(ids)


def _checked_value(name: str, raw: str) -> str:
    value = raw.strip()
    if not value:
        raise ManifestError(f'Dimension "{name}" values cannot be empty')
    if not DIMENSION_VALUE_PATTERN.match(value):
        raise ManifestError(
            f'Dimension "{name}" has invalid value "{raw}". '
            "Values must contain only letters, numbers, hyphens, or underscores"
        )
    if len(value) > MAX_DIMENSION_VALUE_LENGTH:
        raise ManifestError(f'Dimension "{name}" value "{value}" exceeds {MAX_DIMENSION_VALUE_LENGTH} characters')
    return value


def _default(draft: _DraftDimension, raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if draft.selection == SELECTION_SINGLE:
        if not isinstance(raw, str):
            raise ManifestError(f'Dimension "{draft.name}" default must be a string or null')
        candidates = [raw]
    else:
        if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
            raise ManifestError(f'Dimension "{draft.name}" default must be an array of strings')
        candidates = raw

    defaults: list[str] = []
    for candidate in candidates:
        value = candidate.strip()
        if not value:
            continue
        if draft.values and value not in draft.values:
            raise ManifestError(f'Dimension "{draft.name}" default "{value}" must be one of the declared values')
        if value not in defaults:
            defaults.append(value)
    return tuple(defaults)


def _normalize_policy(raw: Any, label: str) -> str:
    if not isinstance(raw, str) or raw.strip().lower() not in VALID_POLICIES:
        raise ManifestError(f'{label} must be "strict" or "warn"')
    return raw.strip().lower()


def _resolve_references(
    draft: _DraftDimension,
    raw: Any,
    kind: str,
    drafts: Mapping[str, _DraftDimension],
) -> Mapping[str, tuple[DimensionRef, ...]]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, dict):
        raise ManifestError(f'Dimension "{draft.name}" {kind} must be an object')

    resolved: dict[str, tuple[DimensionRef, ...]] = {}
    for value, references in raw.items():
        if draft.values and value not in draft.values:
            raise ManifestError(f'Dimension "{draft.name}" {kind} references unknown value "{value}"')
        if not isinstance(references, list) or not references:
            raise ManifestError(f'Dimension "{draft.name}" {kind} entry for "{value}" must be a non-empty array')
        refs: list[DimensionRef] = []
        for reference in references:
            if not isinstance(reference, str) or not reference.strip():
                raise ManifestError(f'Dimension "{draft.name}" {kind} for "{value}" must be strings')
            ref = _parse_reference(draft.name, reference.strip())
            target = drafts.get(ref[0])
            if target is None:
                raise ManifestError(
                    f'Dimension "{draft.name}" {kind} for "{value}" references unknown dimension "{ref[0]}"'
                )
            if target.values and ref[1] not in target.values:
                raise ManifestError(
                    f'Dimension "{draft.name}" {kind} for "{value}" references unknown value "{reference.strip()}"'
                )
            if kind == "conflicts" and ref == (draft.name, value):
                raise ManifestError(f'Dimension "{draft.name}" conflicts for "{value}" cannot reference itself')
            if ref not in refs:
                refs.append(ref)
        resolved[value] = tuple(refs)
    return MappingProxyType(resolved)


def _parse_reference(dimension: str, reference: str) -> DimensionRef:
    if REFERENCE_SEPARATOR in reference:
        target, _sep, value = reference.partition(REFERENCE_SEPARATOR)
        return (target.strip(), value.strip())
    return (dimension, reference)


def _apply_gates(drafts: dict[str, _DraftDimension], gates: Any) -> None:
    if gates is None:
        return
    if not isinstance(gates, dict):
        raise ManifestError("gates must be an object")

    for gate_name, gate in gates.items():
        if not isinstance(gate, dict):
            raise ManifestError(f"Gate '{gate_name}' must be an object")
        constraint = gate.get("constraint")
        message = constraint.strip() if isinstance(constraint, str) and constraint.strip() else f"Blocked by gate {gate_name}"
        for kind in ("allowed", "forbidden"):
            rule = gate.get(kind)
            if rule is None:
                continue
            if isinstance(rule, list):
                _gate_dimension(drafts, gate_name, gate_name, kind, rule, message)
            elif isinstance(rule, dict):
                for dimension, values in rule.items():
                    _gate_dimension(drafts, gate_name, dimension, kind, values, message)
            else:
                raise ManifestError(f"Gate '{gate_name}' {kind} must be an array or an object")


def _gate_dimension(
    drafts: dict[str, _DraftDimension],
    gate_name: str,
    dimension: str,
    kind: str,
    values: Any,
    message: str,
) -> None:
    draft = drafts.get(dimension)
    if draft is None:
        raise ManifestError(f"Gate '{gate_name}' {kind} constraint references unknown dimension: {dimension}")
    if not isinstance(values, list) or not all(isinstance(item, str) for item in values):
        raise ManifestError(f"Gate '{gate_name}' {kind} values for '{dimension}' must be strings")
    listed = {item.strip() for item in values}
    unknown = sorted(value for value in listed if draft.values and value not in draft.values)
    if unknown:
        raise ManifestError(f"Gate '{gate_name}' {kind} invalid value '{unknown[0]}' for dimension '{dimension}'")

    if kind == "forbidden":
        for value in sorted(listed):
            draft.blocked.setdefault(value, message)
        return
    if draft.values == ():
        raise ManifestError(f"Gate '{gate_name}' cannot restrict open dimension '{dimension}' with an allowed list")
    for value in draft.values:
        if value not in listed:
            draft.blocked.setdefault(value, message)


def normalize_token(raw: str) -> str:
    """Return the canonical placeholder token for ``TOKEN`` or ``{{TOKEN}}``."""
    stripped = raw.strip()
    braced = BRACED_TOKEN_PATTERN.match(stripped)
    if braced:
        stripped = braced.group(1)
    if not TOKEN_PATTERN.match(stripped):
        raise ManifestError(
            f"Invalid placeholder token {raw!r}: tokens use uppercase letters, digits, and underscores"
        )
    return stripped


def adapt_placeholders(raw: Any) -> tuple[PlaceholderDefinition, ...]:
    """Return placeholder definitions from a token mapping or a list of named entries."""
    if raw is None:
        return ()
    entries: list[tuple[Any, Any]]
    if isinstance(raw, dict):
        entries = list(raw.items())
    elif isinstance(raw, list):
        entries = []
        for item in raw:
            if not isinstance(item, dict):
                raise ManifestError("placeholders entries must be objects")
            entries.append((item.get("name", item.get("token")), item))
    else:
        raise ManifestError("placeholders must be an object or an array")

    definitions: dict[str, PlaceholderDefinition] = {}
    for raw_token, definition in entries:
        if not isinstance(raw_token, str):
            raise ManifestError("placeholder names must be strings")
        token = normalize_token(raw_token)
        if token in definitions:
            raise ManifestError(f"Duplicate placeholder token {token}")
        definitions[token] = _placeholder_definition(token, definition)
    return tuple(definitions.values())


def _placeholder_definition(token: str, raw: Any) -> PlaceholderDefinition:
    if not isinstance(raw, dict):
        raise ManifestError(f"Placeholder {token} must be an object")

    placeholder_type = raw.get("type", TYPE_TEXT)
    if placeholder_type not in VALID_PLACEHOLDER_TYPES:
        raise ManifestError(
            f"Placeholder {token} has unsupported type {placeholder_type!r}; "
            f"expected one of {sorted(VALID_PLACEHOLDER_TYPES)}"
        )
    required = raw.get("required", False)
    if not isinstance(required, bool):
        raise ManifestError(f"Placeholder {token} required must be a boolean")
    sensitive = raw.get("sensitive", placeholder_type == TYPE_PASSWORD)
    if not isinstance(sensitive, bool):
        raise ManifestError(f"Placeholder {token} sensitive must be a boolean")

    default = raw.get("default")
    if default is not None:
        try:
            default = coerce_value(default, placeholder_type)
        except ValueError as exc:
            raise ManifestError(f"Placeholder {token} default is invalid: {exc}") from exc

    description = raw.get("description")
    return PlaceholderDefinition(
        token=token,
        type=placeholder_type,
        required=required,
        default=default,
        sensitive=sensitive,
        description=description.strip() if isinstance(description, str) and description.strip() else None,
    )
