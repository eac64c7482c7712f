"""Global test configuration."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_bouldering_logger():
    """Undo configure_logging() calls made by CLI tests."""
    logger = logging.getLogger("bouldering")
    level, handlers = logger.level, list(logger.handlers)
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers
