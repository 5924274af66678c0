"""Shared pytest fixtures for the full freezeloader test suite."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Iterator

import pytest

from freezeloader.config import LoaderConfig
from freezeloader.telemetry.logger import BootLogger
from tests.fixture_paths import LANDMARK, LIBRARY_DIR


@pytest.fixture
def boot_sink() -> io.StringIO:
    """Provide an in-memory sink capturing bootstrap diagnostics."""

    return io.StringIO()


@pytest.fixture
def boot_logger(boot_sink: io.StringIO) -> Iterator[BootLogger]:
    """Provide a bootstrap logger writing warnings to `boot_sink`."""

    logger = BootLogger(sink=boot_sink)
    yield logger
    logger.close()


@pytest.fixture
def tree_config(tmp_path: Path) -> LoaderConfig:
    """Provide a config using a small test library layout and unreachable defaults."""

    return LoaderConfig(
        prefix=str(tmp_path / "default-prefix"),
        library_dir=LIBRARY_DIR,
        landmark=LANDMARK,
    )
