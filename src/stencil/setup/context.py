"""Immutable project description handed to setup scripts."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from stencil.types import PlaceholderValue

if TYPE_CHECKING:
    from stencil.setup.tools import SetupTools


@dataclass(frozen=True)
class SetupContext:
    """What a setup script may know about the project being created.

    ``project_dir`` is the absolute project path as a string; scripts change
    files only through the tools.
    """

    project_name: str
    project_dir: str
    options: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    ide: str | None = None
    author: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    inputs: Mapping[str, PlaceholderValue] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class SetupEnvironment:
    """The single argument passed to ``setup(env)``."""

    ctx: SetupContext
    tools: SetupTools
