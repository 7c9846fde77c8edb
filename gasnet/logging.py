"""Centralized logging configuration for gasnet.

Every module logs through ``get_logger(__name__)``; the loggers are children
of the ``gasnet`` logger, which owns the only handler. The action journal
(:mod:`gasnet.journal`) is separate and never goes through these loggers'
handlers.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "gasnet"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_ROOT_LOGGER_CONFIGURED = False


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the single handler of the ``gasnet`` logger.

    Only the first call has an effect until :func:`reset_logging` is called.

    Args:
        level: Logging level (default: INFO).
        format_string: Record format (default: :data:`LOG_FORMAT`).
        handler: Handler to install (default: a StreamHandler on stdout).
    """
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or LOG_FORMAT))
    root_logger.addHandler(handler)

    # Propagate so pytest's caplog sees records
    root_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (typically a module's ``__name__``).

    The logger carries no handler and no level of its own, so it follows
    whatever is set on the ``gasnet`` logger.
    """
    setup_root_logger()

    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the level of the ``gasnet`` logger and its handlers."""
    setup_root_logger()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def level_for_flags(verbose: bool, quiet: bool) -> int:
    """Map the CLI ``--verbose``/``--quiet`` flags to a level; verbose wins."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def reset_logging() -> None:
    """Remove the handler and level from the ``gasnet`` logger (for tests)."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)


setup_root_logger()
