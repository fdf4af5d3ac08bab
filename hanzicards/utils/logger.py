"""Logging setup shared by the library and the command line entry point."""

import logging
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] [%(name)s] %(levelname)s: %(message)s"


def setup_logger(name: str = "hanzicards", level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Configure the package logger once and return it.

    Args:
        name: Logger name; module loggers below it inherit the handler
        level: Level name or number (defaults to Config.LOG_LEVEL)
    """
    if level is None:
        from ..config import Config
        level = Config.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
