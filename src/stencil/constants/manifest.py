"""Template manifest filenames and naming rules."""

from __future__ import annotations

import re

MANIFEST_FILENAME: str = "template.json"
DEFAULT_SETUP_SCRIPT: str = "_setup.py"

SELECTION_SINGLE: str = "single"
SELECTION_MULTI: str = "multi"
VALID_SELECTIONS: frozenset[str] = frozenset({SELECTION_SINGLE, SELECTION_MULTI})

POLICY_STRICT: str = "strict"
POLICY_WARN: str = "warn"
VALID_POLICIES: frozenset[str] = frozenset({POLICY_STRICT, POLICY_WARN})

DIMENSION_NAME_PATTERN: re.Pattern[str] = re.compile(r"^[a-z][a-z0-9_-]{0,49}$")
DIMENSION_VALUE_PATTERN: re.Pattern[str] = re.compile(r"^[A-Za-z0-9_-]+$")
MAX_DIMENSION_VALUE_LENGTH: int = 50

REFERENCE_SEPARATOR: str = "="
