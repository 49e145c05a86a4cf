"""CLI branding strings."""

from __future__ import annotations

CLI_DESCRIPTION: str = (
    "Provision new projects from cached template repositories.\n\n"
    "Templates are fetched once, cached by repository and branch, and reused until\n"
    "their TTL expires. Use --dry-run to preview the files a run would create."
)
