"""Logging setup shared by the engine modules and the command-line scripts.

Engine modules call ``get_logger(__name__)`` and never attach handlers.  A
script calls ``configure_logging`` once at startup; before that the
``expense_tracker`` logger only carries a ``NullHandler``, so importing the
engine inside another application stays silent.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "expense_tracker"
_LEVEL_ENV = "EXPENSE_TRACKER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_CONFIGURED = False
_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str) and level.strip():
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
        return logging.INFO
    env_level = os.getenv(_LEVEL_ENV)
    if env_level and env_level.strip():
        return _parse_level(env_level)
    return logging.INFO


def is_configured() -> bool:
    return _CONFIGURED


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
    force: bool = False,
) -> logging.Logger:
    """Send ``expense_tracker`` log records to ``stream``.

    Only the first call has an effect unless ``force`` is set, in which case
    the handler installed by the earlier call is replaced.  ``level`` may be
    an int, a level name or a numeric string; when it is ``None`` the
    ``EXPENSE_TRACKER_LOG_LEVEL`` environment variable is used, then INFO.
    Returns the package logger.
    """
    global _CONFIGURED, _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _CONFIGURED and not force:
        return logger

    for existing in list(logger.handlers):
        if isinstance(existing, logging.NullHandler) or existing is _handler:
            logger.removeHandler(existing)

    resolved = _parse_level(level)
    _handler = logging.StreamHandler(stream)
    _handler.setLevel(resolved)
    _handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(_handler)
    # Records stop here; the host application's root handlers never see them twice
    logger.propagate = False

    _CONFIGURED = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for an engine module; installs the package ``NullHandler`` if nothing is configured yet."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
