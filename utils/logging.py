"""Structured logging for the decoder and its command line tools."""

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

# Loggers handed out by get_logger, so the CLI can re-level all of them at once
_loggers: dict[str, logging.Logger] = {}


def _level_from_env() -> int:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Return a pre-configured logger for the given module name.

    Output goes to stderr: stdout is reserved for decoded results.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_level_from_env())
        logger.propagate = False
    _loggers[name] = logger
    return logger


def set_level(level: str) -> None:
    """Override the level of every logger created through get_logger."""
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    for logger in _loggers.values():
        logger.setLevel(numeric)
