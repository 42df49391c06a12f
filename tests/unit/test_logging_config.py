"""Tests for logging configuration."""

from __future__ import annotations

import logging

import pytest

from appveyor_status.logging_config import add_app_context, configure_logging, verbosity_to_level


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    ("verbosity", "level"),
    [(-2, logging.ERROR), (-1, logging.ERROR), (0, logging.WARNING), (1, logging.DEBUG)],
)
def test_verbosity_to_level(verbosity, level):
    assert verbosity_to_level(verbosity) == level


def test_configure_logging_default(restore_root_logger):
    configure_logging()
    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configure_logging_very_verbose(restore_root_logger):
    configure_logging(2)
    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG


def test_add_app_context():
    assert add_app_context(None, "info", {"event": "x"}) == {"event": "x", "app": "appveyor-status"}
