"""Structured bootstrap logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level bootstrap logs through `loguru`.
- Emit human-readable discovery diagnostics on standard error, never standard output.
"""

from __future__ import annotations

import re
import sys
from typing import TextIO

from loguru import logger as _loguru_logger

DEFAULT_LEVEL = "WARNING"
_UNSAFE_TOKEN_CHARACTERS = re.compile(r"[^0-9A-Za-z_.:/-]")


def _format_fields(fields: dict[str, object]) -> str:
    """Render `key=value` pairs sorted by key, one shell-safe token per value.

    Characters outside `[0-9A-Za-z_.:/-]` become `_`; blank values render as `none`.
    """

    rendered = ""
    for key in sorted(fields):
        token = _UNSAFE_TOKEN_CHARACTERS.sub("_", str(fields[key]).strip()) or "none"
        rendered += f" {key}={token}"
    return rendered


class BootLogger:
    """Emit deterministic phase logs and diagnostics for one bootstrap."""

    def __init__(self, sink: TextIO | None = None, level: str = DEFAULT_LEVEL) -> None:
        """Route boot lines to `sink` (standard error by default) at `level` and above."""

        self._sink = sink or sys.stderr
        self.level = level
        _loguru_logger.remove()
        self._handler_id = _loguru_logger.add(
            self._sink, format="{message}", level=level, colorize=False
        )

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured bootstrap log line."""

        line = f"[boot] level={level} stage={stage} event={event}{_format_fields(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str) -> None:
        """Emit a stage-start event."""

        self._emit("DEBUG", "start", stage)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete event with its result context."""

        self._emit("DEBUG", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure event without payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def warning(self, message: str) -> None:
        """Emit a plain-text warning for degraded but recoverable bootstrap."""

        _loguru_logger.warning(message)

    def close(self) -> None:
        """Detach this logger's sink so later loguru users start clean."""

        try:
            _loguru_logger.remove(self._handler_id)
        except ValueError:
            pass
