"""Shared test fixtures."""

from __future__ import annotations

import logging

import pytest

from trustscore.models.schemas import RepositorySnapshot


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Restore the package logger after tests that run configure_logging."""
    logger = logging.getLogger("trustscore")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def snapshot() -> RepositorySnapshot:
    """An empty snapshot with no metadata and no clone."""
    return RepositorySnapshot(canonical_url="https://github.com/owner/repo")
