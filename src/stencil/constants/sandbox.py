"""Static guard policy and restricted builtins for setup scripts."""

from __future__ import annotations

SETUP_ENTRYPOINT: str = "setup"

FORBIDDEN_CALL_NAMES: frozenset[str] = frozenset(
    {
        "__import__",
        "breakpoint",
        "compile",
        "delattr",
        "eval",
        "exec",
        "getattr",
        "globals",
        "input",
        "locals",
        "open",
        "setattr",
        "vars",
    }
)

FORBIDDEN_NAMES: frozenset[str] = frozenset(
    {"__builtins__", "__loader__", "__spec__", "importlib"}
)

FORBIDDEN_ATTRIBUTE_NAMES: frozenset[str] = frozenset(
    {"FunctionType", "CodeType", "import_module"}
)

SAFE_BUILTIN_NAMES: tuple[str, ...] = (
    "abs",
    "all",
    "any",
    "bool",
    "dict",
    "enumerate",
    "filter",
    "float",
    "frozenset",
    "int",
    "isinstance",
    "len",
    "list",
    "map",
    "max",
    "min",
    "print",
    "range",
    "repr",
    "reversed",
    "round",
    "set",
    "sorted",
    "str",
    "sum",
    "tuple",
    "zip",
    "Exception",
    "KeyError",
    "RuntimeError",
    "TypeError",
    "ValueError",
)

LEGACY_SIGNATURE_HINT: str = "Setup scripts must define `def setup(env):` and use env.ctx / env.tools"
