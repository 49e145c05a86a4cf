"""Regex patterns for project-name normalization."""

from __future__ import annotations

import re

NON_PROJECT_NAME_PATTERN: re.Pattern[str] = re.compile(r"[^a-z0-9._-]+")
COLLAPSE_DASH_PATTERN: re.Pattern[str] = re.compile(r"-{2,}")
PROJECT_NAME_FALLBACK: str = "project"
