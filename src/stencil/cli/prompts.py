"""Terminal prompting for required placeholders."""

from __future__ import annotations

import getpass
import sys

from stencil.manifest import PlaceholderDefinition


def prompt_placeholder(definition: PlaceholderDefinition) -> str | None:
    """Ask for one required placeholder on the terminal; returns None on EOF."""
    label = definition.description or definition.token
    question = f"{label} [{definition.token}]: "
    try:
        if definition.sensitive:
            return getpass.getpass(question)
        print(question, end="", file=sys.stderr, flush=True)
        line = sys.stdin.readline()
    except (EOFError, KeyboardInterrupt):
        print(file=sys.stderr)
        return None
    return line.rstrip("\n") if line else None
