"""
Library logger for labelstack.

The engines log their decisions (collapsed axes, dtype promotion, binning
shapes) at DEBUG level on children of the ``labelstack`` logger. That logger
carries a NullHandler, so nothing is printed until an application calls
``configure_logging``:

    >>> import logging
    >>> from labelstack.logging import configure_logging
    >>> configure_logging(logging.DEBUG)
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Union

LIBRARY_LOGGER_NAME = "labelstack"

DEFAULT_FORMAT = "%(levelname)s [%(name)s] %(message)s"

logging.getLogger(LIBRARY_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the library logger, or the child logger for module `name`."""
    if name is None or name == LIBRARY_LOGGER_NAME:
        return logging.getLogger(LIBRARY_LOGGER_NAME)
    if not name.startswith(LIBRARY_LOGGER_NAME + "."):
        name = f"{LIBRARY_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[IO[str]] = None,
    format_string: str = DEFAULT_FORMAT,
) -> logging.Handler:
    """
    Send labelstack log records to `stream` (default: stderr).

    The stream handler replaces any handler installed before, so repeated
    calls do not duplicate output.

    Args:
        level: Logging level, as int or name ("debug" and "DEBUG" both work)
        stream: Text stream to write to
        format_string: Format for the records

    Returns:
        The installed handler
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(format_string))

    logger = logging.getLogger(LIBRARY_LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
