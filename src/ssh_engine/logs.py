"""Optional diagnostic log written to engine.log."""

import logging
from pathlib import Path
from typing import Union

from .config import Configuration
from .errors import LogFileError

LOG_FILE_NAME = "engine.log"
LOG_FORMAT = "%(asctime)s %(message)s"
LOGGER_NAME = "ssh_engine"


def setup_logging(config: Configuration, directory: Union[str, Path] = ".") -> logging.Logger:
    """Configure the engine logger.

    When a log file name is configured, diagnostics are appended to
    ``engine.log`` in *directory*. The configured name only switches logging
    on; it is not used as the target path. Otherwise diagnostics are
    discarded.
    """
    logger = logging.getLogger(LOGGER_NAME)
    close_logging(logger)
    logger.propagate = False

    if not config.debug_logging:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
        return logger

    path = Path(directory) / LOG_FILE_NAME
    try:
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError as e:
        raise LogFileError(f"Could not open log file {path}: {e}") from e
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger


def close_logging(logger: logging.Logger) -> None:
    """Close and detach every handler on *logger*."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
