"""Dry-run rendering labels and ANSI colors."""

from __future__ import annotations

ANSI_RESET: str = "\033[0m"
ANSI_BOLD: str = "\033[1m"
ANSI_GREEN: str = "\033[32m"
ANSI_YELLOW: str = "\033[33m"
ANSI_CYAN: str = "\033[36m"

PLAN_TITLE: str = "Dry run: no files will be written"
CATEGORY_DIRECTORIES: str = "Directories to create"
CATEGORY_FILES: str = "Files to copy"
CATEGORY_SETUP: str = "Setup scripts to run"
CATEGORY_UNKNOWN: str = "Unrecognized entries"
UNKNOWN_OPERATION_LABEL: str = "Unknown operation"
