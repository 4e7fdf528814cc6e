"""Logging setup for applications embedding specbind.

Library modules only create ``logging.getLogger(__name__)`` loggers; they
never configure handlers.  :func:`configure_logging` is an opt-in helper
that routes the ``specbind`` logger through a :class:`rich.logging.RichHandler`
writing to stderr.  Colour is disabled when ``NO_COLOR`` is set (any value),
when ``TERM=dumb``, or when *no_color* is passed.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Union

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "specbind"


def should_disable_color() -> bool:
    """Return True when ``NO_COLOR`` is set or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


def configure_logging(level: Union[int, str] = logging.INFO, no_color: bool = False) -> logging.Logger:
    """Attach a stderr :class:`RichHandler` to the ``specbind`` logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Logging level name or number.
        no_color: Force plain output.

    Returns:
        The configured ``specbind`` logger.
    """
    console = Console(
        file=sys.stderr,
        stderr=True,
        no_color=no_color or should_disable_color(),
    )
    handler = RichHandler(console=console, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
