"""Logging setup for the service process."""

from __future__ import annotations

import logging

LOGGER_NAME = "roomsync"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Install one stream handler on the package logger; repeated calls only reset the level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    if not any(getattr(handler, "_roomsync", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._roomsync = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
