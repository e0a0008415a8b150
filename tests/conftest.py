"""Shared pytest fixtures for the humantouch test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _reset_loguru_sinks() -> Iterator[None]:
    """Drop sinks added by `RunLogger` so closed test streams are never written to."""

    yield
    logger.remove()


@pytest.fixture
def write_site(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Return a helper that writes UTF-8 files under a fresh site directory."""

    def _write(files: dict[str, str]) -> Path:
        root = tmp_path / "site"
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content.encode("utf-8"))
        return root

    return _write
