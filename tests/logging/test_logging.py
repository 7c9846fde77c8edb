"""Tests for centralized logging behavior and configuration."""

import logging
from io import StringIO

import pytest

from gasnet.logging import (
    get_logger,
    level_for_flags,
    reset_logging,
    set_global_log_level,
    setup_root_logger,
)


@pytest.fixture(autouse=True)
def _reset_logging_each_test():
    """Reset logging state before and after each test to avoid cross-test bleed."""
    reset_logging()
    yield
    reset_logging()


def test_effective_levels_follow_global_level():
    """INFO by default, DEBUG after raising verbosity, back to INFO after lowering."""
    logger = get_logger("gasnet.test")

    capture = StringIO()
    handler = logging.StreamHandler(capture)
    handler.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.addHandler(handler)

    logger.info("info-1")
    assert "info-1" in capture.getvalue()

    logger.debug("debug-1")
    assert "debug-1" not in capture.getvalue()

    set_global_log_level(logging.DEBUG)
    logger.debug("debug-2")
    assert "debug-2" in capture.getvalue()

    set_global_log_level(logging.INFO)
    logger.debug("debug-3")
    assert "debug-3" not in capture.getvalue()

    logger.removeHandler(handler)


@pytest.mark.parametrize(
    "verbose, quiet, expected",
    [
        (False, False, logging.INFO),
        (True, False, logging.DEBUG),
        (False, True, logging.WARNING),
        (True, True, logging.DEBUG),
    ],
)
def test_level_for_flags(verbose, quiet, expected):
    assert level_for_flags(verbose, quiet) == expected


def test_global_level_applies_to_children():
    """Changing global level updates existing and new child loggers."""
    registry_logger = get_logger("gasnet.model.registry")
    flow_logger = get_logger("gasnet.algorithms.max_flow")
    assert registry_logger.getEffectiveLevel() == logging.INFO

    set_global_log_level(logging.WARNING)
    assert registry_logger.getEffectiveLevel() == logging.WARNING
    assert flow_logger.getEffectiveLevel() == logging.WARNING
    assert get_logger("gasnet.io").getEffectiveLevel() == logging.WARNING


def test_setup_root_logger_idempotent_no_duplicate_handlers():
    """Repeated setup should not accumulate handlers."""
    handler = logging.StreamHandler(StringIO())
    setup_root_logger(level=logging.INFO, handler=handler)

    root_logger = logging.getLogger("gasnet")
    assert root_logger.handlers == [handler]

    setup_root_logger(level=logging.DEBUG)
    assert len(root_logger.handlers) == 1

    set_global_log_level(logging.ERROR)
    assert root_logger.level == logging.ERROR
    assert handler.level == logging.ERROR


def test_custom_format_string_applied():
    """Custom format string is respected by the root handler."""
    capture = StringIO()
    handler = logging.StreamHandler(capture)
    fmt = "LEVEL:%(levelname)s|NAME:%(name)s|MSG:%(message)s"
    setup_root_logger(level=logging.INFO, format_string=fmt, handler=handler)

    get_logger("gasnet.analysis").info("hello")
    out = capture.getvalue()
    assert "LEVEL:INFO" in out
    assert "NAME:gasnet.analysis" in out
    assert "MSG:hello" in out


def test_registry_debug_messages(caplog):
    """Registry mutations are logged at DEBUG under their module logger."""
    from gasnet.model.registry import Registry

    set_global_log_level(logging.DEBUG)
    caplog.set_level(logging.DEBUG, logger="gasnet.model.registry")
    reg = Registry()
    reg.add_station("A", 1, 1, 1)
    assert any(
        r.levelno == logging.DEBUG and "Added station 1" in r.getMessage()
        for r in caplog.records
    )
