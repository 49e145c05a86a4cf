"""Canonical template manifest model."""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from stencil.constants.manifest import SELECTION_MULTI
from stencil.types import PlaceholderType, PlaceholderValue, SelectionType, UnknownPolicy

DimensionRef: TypeAlias = tuple[str, str]


def _empty_mapping() -> Mapping[str, tuple[DimensionRef, ...]]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Dimension:
    """A named configuration axis declared by a template.

    ``requires`` and ``conflicts`` map a value of this dimension to the
    ``(dimension, value)`` pairs that must or must not be selected alongside it.
    ``blocked`` maps values a gate forbids to the gate's constraint message.
    """

    name: str
    selection: SelectionType
    values: tuple[str, ...] = ()
    default: tuple[str, ...] = ()
    requires: Mapping[str, tuple[DimensionRef, ...]] = field(default_factory=_empty_mapping)
    conflicts: Mapping[str, tuple[DimensionRef, ...]] = field(default_factory=_empty_mapping)
    blocked: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    policy: UnknownPolicy | None = None
    description: str | None = None

    @property
    def is_multi(self) -> bool:
        return self.selection == SELECTION_MULTI

    @property
    def is_open(self) -> bool:
        """True when the dimension declares no value set and accepts anything."""
        return not self.values

    def declares(self, value: str) -> bool:
        """Return True when ``value`` is acceptable without consulting the policy."""
        return self.is_open or value in self.values


@dataclass(frozen=True)
class PlaceholderDefinition:
    """A typed text token substituted into template files."""

    token: str
    type: PlaceholderType = "text"
    required: bool = False
    default: PlaceholderValue | None = None
    sensitive: bool = False
    description: str | None = None


@dataclass(frozen=True)
class TemplateManifest:
    """A template directory and its adapted manifest."""

    name: str
    path: Path
    dimensions: Mapping[str, Dimension] = field(default_factory=lambda: MappingProxyType({}))
    placeholders: tuple[PlaceholderDefinition, ...] = ()
    setup_script: str | None = None
    description: str | None = None

    @property
    def setup_script_path(self) -> Path | None:
        if self.setup_script is None:
            return None
        return self.path / self.setup_script
