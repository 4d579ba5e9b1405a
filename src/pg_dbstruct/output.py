"""Filesystem and formatter sinks for generated files."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


class OutputError(RuntimeError):
    """Raised when a generated file cannot be written."""


def write_file(path: Path, content: str) -> None:
    """Write ``content`` to ``path``, creating parent directories first."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Could not write generated file {path}: {exc}") from exc
    logger.debug("Wrote %s (%d bytes)", path, len(content))


def format_file(path: Path, command: Sequence[str]) -> None:
    """Run the formatter on ``path`` in place; failures are only logged."""
    if not command:
        return
    try:
        result = subprocess.run(
            [*command, str(path)],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.debug("Formatter %s unavailable: %s", command[0], exc)
        return
    if result.returncode != 0:
        logger.debug(
            "Formatter %s failed on %s: %s",
            command[0],
            path,
            result.stderr.strip(),
        )
