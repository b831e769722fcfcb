"""Logging configuration for soundcurator."""

from __future__ import annotations

import logging


SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
_CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: str | None = None,
    stream=None,
) -> logging.Logger:
    """Configure and return the soundcurator logger.

    verbose: set DEBUG level (all messages)
    quiet: set WARNING level (errors and warnings only)
    log_file: append log entries to this path
    stream: also echo entries to this stream (e.g. sys.stderr)
    """
    logger = logging.getLogger("soundcurator")

    # Clear existing handlers to avoid duplication on repeated calls
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(file_handler)

    if stream is not None:
        stream_handler = logging.StreamHandler(stream)
        stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        logger.addHandler(stream_handler)

    return logger


def log_success(logger: logging.Logger, message: str, *args) -> None:
    """Log a message at the SUCCESS level."""
    logger.log(SUCCESS, message, *args)
