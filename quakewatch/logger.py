"""Logging setup for the dashboard."""

from __future__ import annotations
import logging
from typing import Optional, Union

PKG_LOGGER_NAME = "quakewatch"

logging.getLogger(PKG_LOGGER_NAME).addHandler(logging.NullHandler())


def configure_logging(level: Union[int, str] = logging.INFO, fmt: Optional[str] = None) -> None:
    """
    Attach a StreamHandler to the package logger.

    Called once by the web app at startup; library use stays silent
    unless the host application opts in.
    """
    logger = logging.getLogger(PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if not isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        fmt or "[%(asctime)s] %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.setLevel(level)
    logger.addHandler(handler)
