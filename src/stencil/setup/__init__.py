"""Customization runtime: context, guard, tools, and script execution."""

from stencil.setup.context import SetupContext, SetupEnvironment
from stencil.setup.guard import GuardFinding, check_source, scan_source
from stencil.setup.tools import SetupTools, build_tools
from stencil.setup.runtime import SetupResult, load_entrypoint, run_setup

__all__ = [
    "GuardFinding",
    "SetupContext",
    "SetupEnvironment",
    "SetupResult",
    "SetupTools",
    "build_tools",
    "check_source",
    "load_entrypoint",
    "run_setup",
    "scan_source",
]
