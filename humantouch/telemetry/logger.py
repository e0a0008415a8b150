"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level batch logs through `loguru`.
- Keep per-file records single-line with sorted, shell-safe context tokens.
"""

from __future__ import annotations

import re
import sys
from typing import Mapping, TextIO

from loguru import logger

_UNSAFE_TOKEN_CHARS = re.compile(r"[^\w.:/-]")


def _context_suffix(context: Mapping[str, object]) -> str:
    """Render context as ` key=value` tokens, keys sorted and values shell-safe."""

    tokens = []
    for key in sorted(context):
        value = _UNSAFE_TOKEN_CHARS.sub("_", str(context[key]).strip()) or "none"
        tokens.append(f" {key}={value}")
    return "".join(tokens)


class RunLogger:
    """Emit deterministic phase logs for CLI-observable batch activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Route `loguru` output to `sink` with a bare message format."""

        self._sink = sink or sys.stderr
        logger.remove()
        logger.add(self._sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_context_suffix(context)}"
        logger.log(level, line)

    def log_batch_start(self, total_files: int, max_concurrency: int) -> None:
        """Emit the batch-start event."""

        self._emit(
            "INFO", "start", "batch", files=total_files, max_concurrency=max_concurrency
        )

    def log_batch_complete(
        self, processed: int, changed: int, errors: int, success: bool
    ) -> None:
        """Emit the batch-complete event with aggregate counters."""

        self._emit(
            "INFO",
            "complete",
            "batch",
            changed=changed,
            errors=errors,
            processed=processed,
            success=str(success).lower(),
        )

    def log_pattern_miss(self, pattern_count: int) -> None:
        """Emit a warning when no file matched any pattern."""

        self._emit("WARNING", "pattern_miss", "batch", patterns=pattern_count)

    def log_file_transition(self, path: str, state: str) -> None:
        """Emit a debug-level per-file state transition."""

        self._emit("DEBUG", "transition", "file", path=path, state=state)

    def log_file_outcome(self, path: str, status: str, changes: int) -> None:
        """Emit a per-file terminal outcome; skipped files log at debug level."""

        level = "DEBUG" if status == "skipped" else "INFO"
        self._emit(level, status, "file", changes=changes, path=path)

    def log_file_failure(self, path: str, error_type: str) -> None:
        """Emit a per-file failure without the file payload."""

        self._emit("ERROR", "failure", "file", error_type=error_type, path=path)
