"""Stable validation issue codes for option and placeholder resolution."""

from __future__ import annotations

OPT001: str = "OPT001"  # malformed option token
OPT002: str = "OPT002"  # multiple values for single-select dimension
OPT003: str = "OPT003"  # unknown dimension or value under strict policy
OPT004: str = "OPT004"  # conflicting values selected together
OPT005: str = "OPT005"  # required co-selection missing
OPT006: str = "OPT006"  # value blocked by a gate

PH001: str = "PH001"  # required placeholder has no value
PH002: str = "PH002"  # value does not satisfy declared type
