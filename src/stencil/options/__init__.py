"""Dimension-based option normalization."""

from __future__ import annotations

from stencil.options.normalizer import OptionsResult, check_constraints, normalize_options, split_option_args

__all__ = ["OptionsResult", "check_constraints", "normalize_options", "split_option_args"]
