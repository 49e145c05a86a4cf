"""Load and run a template's setup script."""

from __future__ import annotations

import builtins
import inspect
import logging
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import FrameType
from typing import Any, TypeAlias

from stencil.constants.config import DEFAULT_SETUP_TIMEOUT_SECONDS
from stencil.constants.sandbox import LEGACY_SIGNATURE_HINT, SAFE_BUILTIN_NAMES, SETUP_ENTRYPOINT
from stencil.exceptions import SetupFailure, SetupTimeout, StencilError
from stencil.setup.context import SetupContext, SetupEnvironment
from stencil.setup.guard import check_source
from stencil.setup.tools import SetupTools

logger = logging.getLogger(__name__)

TraceFunction: TypeAlias = Callable[[FrameType, str, Any], Any]


@dataclass(frozen=True)
class SetupResult:
    """Outcome of a single setup attempt. ``error`` carries the original diagnostic."""

    success: bool
    script: Path
    error: StencilError | None = None

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error is not None else None


class _Deadline(BaseException):
    """Raised inside the script's frames when the time budget runs out."""


def _restricted_builtins() -> dict[str, Any]:
    allowed = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}
    allowed["__build_class__"] = builtins.__build_class__
    return allowed


class _DeadlineTracer:
    """Trace hook that interrupts frames belonging to one script after a deadline.

    CPython switches tracing off once a trace function raises, so the deadline
    fires a single time. Code the script runs in a ``finally`` block after that
    is not interrupted again; ``expired`` still records that the budget ran out
    so the run is reported as timed out once it returns.
    """

    def __init__(self, filename: str, timeout: float) -> None:
        self._filename = filename
        self._deadline = time.monotonic() + timeout
        self.expired = False

    def __call__(self, frame: FrameType, event: str, arg: Any) -> TraceFunction | None:
        if frame.f_code.co_filename != self._filename:
            return None
        self._check()
        return self._local

    def _local(self, frame: FrameType, event: str, arg: Any) -> TraceFunction:
        self._check()
        return self._local

    def _check(self) -> None:
        if time.monotonic() > self._deadline:
            self.expired = True
            raise _Deadline()


def load_entrypoint(script_path: Path) -> Callable[[SetupEnvironment], Any]:
    """Guard, compile and execute a script module, returning its ``setup`` callable."""
    try:
        source = script_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SetupFailure(f"Unable to read setup script {script_path}: {exc}") from exc

    filename = str(script_path)
    tree = check_source(source, filename)
    code = compile(tree, filename, "exec")
    namespace: dict[str, Any] = {"__builtins__": _restricted_builtins(), "__name__": "stencil_setup"}
    try:
        exec(code, namespace)
    except StencilError:
        raise
    except Exception as exc:
        raise SetupFailure(f"Setup script {script_path.name} failed while loading: {exc}") from exc

    entrypoint = namespace.get(SETUP_ENTRYPOINT)
    if not inspect.isfunction(entrypoint):
        raise SetupFailure(f"Setup script {script_path.name} does not define {SETUP_ENTRYPOINT}(). {LEGACY_SIGNATURE_HINT}")
    _check_signature(entrypoint, script_path)
    return entrypoint


def _check_signature(entrypoint: Callable[..., Any], script_path: Path) -> None:
    parameters = list(inspect.signature(entrypoint).parameters.values())
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    if len(parameters) != 1 or parameters[0].kind not in positional:
        shape = ", ".join(parameter.name for parameter in parameters) or "no arguments"
        raise SetupFailure(
            f"Setup script {script_path.name} defines {SETUP_ENTRYPOINT}({shape}). {LEGACY_SIGNATURE_HINT}"
        )


def run_setup(
    script_path: Path,
    context: SetupContext,
    tools: SetupTools,
    *,
    timeout: float = DEFAULT_SETUP_TIMEOUT_SECONDS,
) -> SetupResult:
    """Run ``setup(env)`` from ``script_path`` once.

    Every failure, including a guard rejection, is reported in the returned
    SetupResult rather than raised. Whether that aborts provisioning is up to
    the caller. The timeout is best effort: it interrupts the script once, and
    code the script runs in a ``finally`` block afterwards is not stopped again.
    """
    script_path = script_path.resolve()
    tracer = _DeadlineTracer(str(script_path), timeout)
    previous = sys.gettrace()
    sys.settrace(tracer)
    try:
        entrypoint = load_entrypoint(script_path)
        entrypoint(SetupEnvironment(ctx=context, tools=tools))
        if tracer.expired:
            raise _Deadline()
    except _Deadline:
        error: StencilError = SetupTimeout(f"Setup script {script_path.name} exceeded {timeout:g}s and was stopped")
    except StencilError as exc:
        error = exc
    except Exception as exc:
        error = SetupFailure(f"Setup script {script_path.name} failed: {type(exc).__name__}: {exc}")
        error.__cause__ = exc
    else:
        logger.debug("Setup script %s completed", script_path)
        return SetupResult(success=True, script=script_path)
    finally:
        sys.settrace(previous)

    logger.debug("Setup script %s failed: %s", script_path, error)
    return SetupResult(success=False, script=script_path, error=error)
