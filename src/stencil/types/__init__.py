"""Shared type aliases for Stencil."""

from .cache import CacheMetadata
from .common import (
    LookupReason,
    PlaceholderType,
    PlaceholderValue,
    SelectionType,
    SetupFailurePolicy,
    UnknownPolicy,
    ValueSource,
)

__all__ = [
    "CacheMetadata",
    "LookupReason",
    "PlaceholderType",
    "PlaceholderValue",
    "SelectionType",
    "SetupFailurePolicy",
    "UnknownPolicy",
    "ValueSource",
]
