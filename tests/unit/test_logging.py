"""Tests for connforge logging configuration."""

import logging

import pytest

from connforge.logging import TECHNICAL_MODULES, configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield
    root.setLevel(level)
    root.handlers[:] = handlers


def test_get_logger_adds_single_handler():
    logger = get_logger("connforge.tests.single")
    again = get_logger("connforge.tests.single")

    assert logger is again
    assert len(logger.handlers) == 1
    assert not logger.propagate


def test_default_quiets_technical_modules():
    configure_logging()

    assert logging.getLogger().level == logging.INFO
    for name in TECHNICAL_MODULES:
        assert logging.getLogger(name).level == logging.WARNING


def test_verbose_enables_debug():
    configure_logging(verbose=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("connforge.codegen.planner").level == logging.DEBUG


def test_quiet_wins_over_verbose():
    configure_logging(verbose=True, quiet=True)
    assert logging.getLogger().level == logging.WARNING
