from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from archmap.logging import ROOT_LOGGER
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable source tree builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_archmap_logger() -> Iterator[None]:
    """Drop handlers installed by CLI runs so they never outlive a captured stream."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
