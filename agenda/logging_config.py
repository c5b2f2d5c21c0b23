"""Logging setup for the agenda service."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_LOGGER_INITIALIZED = False


def configure_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the ``agenda`` logger and return it.

    Calling it again only adjusts the level.
    """
    global _LOGGER_INITIALIZED
    logger = logging.getLogger("agenda")
    logger.setLevel(level)
    if _LOGGER_INITIALIZED:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    _LOGGER_INITIALIZED = True
    logger.info("Logging initialized at %s", logging.getLevelName(logger.level))
    return logger
