"""Locate templates inside a cached repository and load their manifests."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from stencil.constants.manifest import DEFAULT_SETUP_SCRIPT, MANIFEST_FILENAME
from stencil.exceptions import ManifestError
from stencil.io import load_json_file
from stencil.manifest.adapter import adapt_dimensions, adapt_placeholders
from stencil.manifest.model import TemplateManifest

logger = logging.getLogger(__name__)


def list_templates(tree: Path) -> list[str]:
    """Return names of top-level template directories that carry a manifest."""
    return sorted(
        child.name
        for child in tree.iterdir()
        if child.is_dir() and (child / MANIFEST_FILENAME).is_file()
    )


def locate_template(tree: Path, template_name: str | None) -> Path:
    """Return the directory of ``template_name`` inside ``tree``.

    A repository whose root holds a manifest is itself the only template.
    """
    tree = tree.resolve()
    if (tree / MANIFEST_FILENAME).is_file() and not template_name:
        return tree
    if not template_name:
        available = list_templates(tree)
        if len(available) == 1:
            return tree / available[0]
        raise ManifestError(
            "A template name is required; available templates: " + (", ".join(available) or "none")
        )

    candidate = (tree / template_name).resolve()
    if not candidate.is_relative_to(tree) or candidate == tree:
        raise ManifestError(f"Invalid template name: {template_name!r}")
    if not candidate.is_dir():
        available = list_templates(tree)
        raise ManifestError(
            f"Template {template_name!r} not found; available templates: " + (", ".join(available) or "none")
        )
    return candidate


def load_manifest(template_dir: Path) -> TemplateManifest:
    """Load ``template.json`` from a template directory and adapt it."""
    manifest_path = template_dir / MANIFEST_FILENAME
    raw: dict[str, Any] = {}
    if manifest_path.is_file():
        try:
            payload = load_json_file(manifest_path)
        except (OSError, json.JSONDecodeError) as exc:
            raise ManifestError(f"Invalid template manifest at {manifest_path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ManifestError(f"Template manifest at {manifest_path} must be a JSON object")
        raw = payload
    else:
        logger.debug("No manifest in %s; using an empty manifest", template_dir)

    setup = raw.get("setup") or {}
    if not isinstance(setup, dict):
        raise ManifestError("setup must be an object")

    raw_dimensions = raw.get("dimensions", setup.get("dimensions"))
    dimensions = adapt_dimensions(
        raw_dimensions,
        gates=raw.get("gates"),
        default_policy=setup.get("policy"),
    )

    name = raw.get("name")
    description = raw.get("description")
    return TemplateManifest(
        name=name.strip() if isinstance(name, str) and name.strip() else template_dir.name,
        path=template_dir,
        dimensions=dimensions,
        placeholders=adapt_placeholders(raw.get("placeholders")),
        setup_script=_setup_script(template_dir, setup.get("script")),
        description=description.strip() if isinstance(description, str) and description.strip() else None,
    )


def _setup_script(template_dir: Path, declared: Any) -> str | None:
    if declared is None:
        return DEFAULT_SETUP_SCRIPT if (template_dir / DEFAULT_SETUP_SCRIPT).is_file() else None
    if not isinstance(declared, str) or not declared.strip():
        raise ManifestError("setup.script must be a non-empty string")
    script = Path(declared.strip())
    if script.is_absolute() or ".." in script.parts:
        raise ManifestError(f"setup.script must be a relative path inside the template: {declared!r}")
    if not (template_dir / script).is_file():
        raise ManifestError(f"setup.script {declared!r} does not exist in {template_dir}")
    return script.as_posix()
