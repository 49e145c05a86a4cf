"""Cross-module type aliases."""

from __future__ import annotations

from typing import Literal, TypeAlias

SelectionType: TypeAlias = Literal["single", "multi"]
UnknownPolicy: TypeAlias = Literal["strict", "warn"]
PlaceholderType: TypeAlias = Literal["text", "number", "boolean", "email", "url", "password"]
ValueSource: TypeAlias = Literal["flag", "prompt", "environment", "config", "default"]
LookupReason: TypeAlias = Literal["fresh", "absent", "stale", "corrupted", "no_cache", "fetched"]
SetupFailurePolicy: TypeAlias = Literal["warn", "abort"]

PlaceholderValue: TypeAlias = str | float | bool
