"""Placeholder token rules, types, and value sources."""

from __future__ import annotations

import re

TOKEN_PATTERN: re.Pattern[str] = re.compile(r"^[A-Z0-9_]+$")
BRACED_TOKEN_PATTERN: re.Pattern[str] = re.compile(r"^\{\{\s*([A-Za-z0-9_]+)\s*\}\}$")

TYPE_TEXT: str = "text"
TYPE_NUMBER: str = "number"
TYPE_BOOLEAN: str = "boolean"
TYPE_EMAIL: str = "email"
TYPE_URL: str = "url"
TYPE_PASSWORD: str = "password"
VALID_PLACEHOLDER_TYPES: frozenset[str] = frozenset(
    {TYPE_TEXT, TYPE_NUMBER, TYPE_BOOLEAN, TYPE_EMAIL, TYPE_URL, TYPE_PASSWORD}
)

SOURCE_FLAG: str = "flag"
SOURCE_PROMPT: str = "prompt"
SOURCE_ENVIRONMENT: str = "environment"
SOURCE_CONFIG: str = "config"
SOURCE_DEFAULT: str = "default"

EMAIL_PATTERN: re.Pattern[str] = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_PATTERN: re.Pattern[str] = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://[^\s/?#]+[^\s]*$")

REDACTED_VALUE: str = "******"
PROJECT_NAME_TOKEN: str = "PROJECT_NAME"
