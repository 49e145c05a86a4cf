"""Template manifest model, shape adaptation, and loading."""

from __future__ import annotations

from stencil.manifest.adapter import adapt_dimensions, adapt_placeholders, normalize_token
from stencil.manifest.loader import list_templates, load_manifest, locate_template
from stencil.manifest.model import Dimension, PlaceholderDefinition, TemplateManifest

__all__ = [
    "Dimension",
    "PlaceholderDefinition",
    "TemplateManifest",
    "adapt_dimensions",
    "adapt_placeholders",
    "list_templates",
    "load_manifest",
    "locate_template",
    "normalize_token",
]
