"""Filesystem collaborators used by the batch orchestrator.

Responsibilities:
- Expand glob patterns into file paths.
- Read, write, and copy UTF-8 documents without translating line endings.
"""

from __future__ import annotations

import glob
from pathlib import Path
import shutil


def list_files(pattern: str) -> list[str]:
    """Return regular files matching `pattern`, with `**` spanning directories."""

    return [
        match
        for match in glob.glob(pattern, recursive=True)
        if Path(match).is_file()
    ]


def read_text_file(path: str) -> str:
    """Read a UTF-8 file, keeping `\\r\\n` sequences as written."""

    with Path(path).open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def write_text_file(path: str, content: str) -> None:
    """Replace a file's content with UTF-8 text, writing line endings verbatim."""

    with Path(path).open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)


def copy_file(source: str, destination: str) -> None:
    """Copy file bytes from `source` to `destination`, overwriting any existing file."""

    shutil.copyfile(source, destination)
