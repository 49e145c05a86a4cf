"""Logging tool for setup scripts."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("stencil.setup.script")


class LogTool:
    def info(self, message: str, data: Any = None) -> None:
        logger.info(_with_data(message, data))

    def warn(self, message: str, data: Any = None) -> None:
        logger.warning(_with_data(message, data))


def _with_data(message: str, data: Any) -> str:
    if data is None:
        return str(message)
    return f"{message} {json.dumps(data, sort_keys=True, default=str)}"
