"""Mini README: Logging setup for the revenue ledger.

Structure:
    * level_for_environment - maps the configured environment to a log level.
    * configure_root_logger - one-time root handler setup for entry points.
    * get_logger - module logger accessor.

Usage:
    Library modules only call ``get_logger(__name__)``; they never touch the
    root logger. Entry points (the CLI and the web application factory) call
    ``configure_root_logger`` once, which logs at DEBUG in development and at
    INFO everywhere else unless an explicit level is given.
"""

from __future__ import annotations

import logging
from typing import Optional

from .configuration import get_settings

_LOGGER_INITIALISED = False

_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"


def level_for_environment(environment: str) -> int:
    """Return DEBUG for development environments and INFO otherwise."""

    if environment.strip().lower() in {"development", "dev", "local"}:
        return logging.DEBUG
    return logging.INFO


def configure_root_logger(level: Optional[int] = None) -> None:
    """Attach a single stream handler to the root logger."""

    global _LOGGER_INITIALISED
    if _LOGGER_INITIALISED:
        return
    if level is None:
        level = level_for_environment(get_settings().environment)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True
    logging.getLogger(__name__).debug("Root logger configured at %s", logging.getLevelName(level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)
