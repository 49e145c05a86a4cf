"""Read-only view of the selected options."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from stencil.exceptions import SetupFailure


class OptionsTool:
    """Answers questions about which dimension values were chosen."""

    def __init__(self, options: Mapping[str, tuple[str, ...]]) -> None:
        self._options = options

    def list(self) -> tuple[str, ...]:
        """All selected values across dimensions, in dimension order."""
        return tuple(value for values in self._options.values() for value in values)

    def selected(self, dimension: str) -> tuple[str, ...]:
        return tuple(self._options.get(dimension, ()))

    def has(self, name: str) -> bool:
        """True when ``name`` is selected; ``dimension=value`` checks one dimension only."""
        if not isinstance(name, str) or not name.strip():
            raise SetupFailure("options.has requires an option name")
        if "=" in name:
            dimension, value = name.split("=", 1)
            return value in self.selected(dimension)
        return name in self.list()

    def when(self, name: str, callback: Callable[[], Any]) -> Any:
        """Call ``callback`` only when ``name`` is selected."""
        if self.has(name):
            return callback()
        return None
