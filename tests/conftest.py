"""Shared fixtures."""

import logging

import pytest

import vigil.logging_setup as ls


@pytest.fixture(autouse=True)
def reset_vigil_logger():
    """Undo setup_logging so caplog sees vigil records in every test."""
    yield
    ls._CONFIGURED = False
    logger = logging.getLogger("vigil")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
