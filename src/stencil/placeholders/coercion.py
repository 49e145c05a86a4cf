"""Type coercion for placeholder values."""

from __future__ import annotations

import math

from stencil.constants.placeholders import (
    EMAIL_PATTERN,
    TYPE_BOOLEAN,
    TYPE_EMAIL,
    TYPE_NUMBER,
    TYPE_URL,
    URL_PATTERN,
)
from stencil.types import PlaceholderValue


def coerce_value(value: object, placeholder_type: str) -> PlaceholderValue:
    """Coerce a raw value to the declared placeholder type.

    Raises ValueError with a short reason when the value does not fit.
    """
    if placeholder_type == TYPE_NUMBER:
        return _coerce_number(value)
    if placeholder_type == TYPE_BOOLEAN:
        return _coerce_boolean(value)

    if isinstance(value, bool) or not isinstance(value, str | int | float):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    text = value if isinstance(value, str) else str(value)
    if placeholder_type == TYPE_EMAIL:
        text = text.strip()
        if not EMAIL_PATTERN.match(text):
            raise ValueError(f"{text!r} is not a valid email address")
    elif placeholder_type == TYPE_URL:
        text = text.strip()
        if not URL_PATTERN.match(text):
            raise ValueError(f"{text!r} is not a valid URL")
    return text


def _coerce_number(value: object) -> float:
    if isinstance(value, bool):
        raise ValueError("expected a number, got a boolean")
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("expected a number, got an empty string")
        try:
            number = float(stripped)
        except ValueError:
            raise ValueError(f"{value!r} is not a number") from None
    else:
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if not math.isfinite(number):
        raise ValueError(f"{value!r} is not a finite number")
    return number


def _coerce_boolean(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValueError(f"{value!r} is not a boolean (expected true or false)")


def format_value(value: PlaceholderValue) -> str:
    """Render a resolved value as the text substituted into files."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
