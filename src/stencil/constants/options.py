"""Option token grammar."""

from __future__ import annotations

ASSIGNMENT_SEPARATOR: str = "="
MULTI_VALUE_SEPARATOR: str = "+"
