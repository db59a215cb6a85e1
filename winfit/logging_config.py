"""
Logging configuration for the winfit command line.

The library only creates module loggers under the "winfit" namespace; this
module attaches handlers to that namespace when the CLI starts.
"""

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "winfit"

# -v count to level; anything above the last entry stays at DEBUG
VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)

CONSOLE_FORMAT = "winfit: %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def level_for(verbosity: int) -> int:
    """Map a -v count to a logging level."""
    index = min(max(verbosity, 0), len(VERBOSITY_LEVELS) - 1)
    return VERBOSITY_LEVELS[index]


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Attach console (and optional file) handlers to the winfit logger.

    Calling it again replaces the handlers from the previous call.

    Args:
        verbosity: Number of -v flags; 0 is warnings only.
        log_file: Also write full records to this file.
        stream: Console stream; stderr by default so JSON on stdout stays
            parseable.

    Returns:
        The configured "winfit" logger.
    """
    level = level_for(verbosity)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.debug("Logging at %s", logging.getLevelName(level))
    return logger
