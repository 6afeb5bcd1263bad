"""Logging configuration for the ``moulax`` package.

Entry points (the CLI, a host web application) call :func:`configure_logging`
once at startup. Library modules only ever call :func:`get_logger` with a
dotted name under ``moulax`` and never attach handlers themselves.

The level is taken from the explicit argument, else from ``MOULAX_LOG_LEVEL``,
else ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "moulax"
LEVEL_ENV_VAR = "MOULAX_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_configured_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Translate ``level`` (or the environment) into a numeric logging level.

    Unknown names fall back to ``INFO`` rather than failing startup.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    text = level.strip().upper()
    if text.isdigit():
        return int(text)
    named = logging.getLevelName(text)
    return named if isinstance(named, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach a single stream handler to the ``moulax`` logger.

    Calling it again is a no-op and returns the already configured logger.
    """

    global _configured_handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _configured_handler is not None:
        return logger

    for existing in list(logger.handlers):
        if isinstance(existing, logging.NullHandler):
            logger.removeHandler(existing)

    numeric = resolve_level(level)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(numeric)
    logger.propagate = False
    _configured_handler = handler
    return logger


def reset_logging() -> None:
    """Detach the handler installed by :func:`configure_logging` (tests only)."""

    global _configured_handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _configured_handler is not None:
        logger.removeHandler(_configured_handler)
        _configured_handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)`` with a silent default for library use."""

    root = logging.getLogger(PACKAGE_LOGGER)
    if _configured_handler is None and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "configure_logging",
    "get_logger",
    "reset_logging",
    "resolve_level",
]
