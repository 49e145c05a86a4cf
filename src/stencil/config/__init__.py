"""Configuration loading and normalization for Stencil."""

from __future__ import annotations

from stencil.config.loader import find_config_path, load_config
from stencil.config.model import AuthorConfig, CacheConfig, SetupConfig, StencilConfig

__all__ = [
    "AuthorConfig",
    "CacheConfig",
    "SetupConfig",
    "StencilConfig",
    "find_config_path",
    "load_config",
]
