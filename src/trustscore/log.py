"""Logging setup for the CLI."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# LOG_LEVEL value -> logging level; 0 silences output
LOG_LEVELS = {
    0: logging.CRITICAL + 1,
    1: logging.INFO,
    2: logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = 0, log_file: Path | None = None) -> logging.Logger:
    """Configure the ``trustscore`` logger.

    Args:
        level: 0 (silent), 1 (info) or 2 (debug).
        log_file: Write to this file instead of stderr.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("trustscore")
    logger.setLevel(LOG_LEVELS.get(level, logging.DEBUG))
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if level == 0:
        logger.addHandler(logging.NullHandler())
        return logger

    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    logger.addHandler(handler)
    return logger
