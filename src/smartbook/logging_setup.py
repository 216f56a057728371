# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Logging for the ``smartbook`` package.

Library modules only call ``get_logger(__name__)``; they never attach
handlers. The CLI (or any host application) calls ``configure_logging``
once at startup, which installs a single stderr handler on the
``smartbook`` package logger.

The level is chosen in this order:

1. the explicit ``level`` argument (``--log-level`` or ``[logging] level``),
2. the ``SMARTBOOK_LOG_LEVEL`` environment variable,
3. ``INFO``.

Level names are validated: a misspelled name raises ``ValueError`` instead
of silently falling back to the default.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "smartbook"
LOG_LEVEL_ENV = "SMARTBOOK_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

_configured = False


def _level_from_name(value: int | str, source: str) -> int:
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    if name not in LEVEL_NAMES:
        raise ValueError(
            f"Invalid log level {value!r} from {source}, "
            f"expected one of: {', '.join(LEVEL_NAMES)}."
        )
    return logging.getLevelName(name)


def resolve_log_level(level: int | str | None = None) -> int:
    """Return the numeric logging level to use.

    Raises:
        ValueError: if ``level`` or ``SMARTBOOK_LOG_LEVEL`` is not a known
            level name or number.
    """
    if level is not None and str(level).strip():
        return _level_from_name(level, "the command line or configuration")
    env_value = os.getenv(LOG_LEVEL_ENV, "").strip()
    if env_value:
        return _level_from_name(env_value, LOG_LEVEL_ENV)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Install the package handler. Later calls are no-ops.

    Raises:
        ValueError: if the level cannot be resolved.
    """
    global _configured
    if _configured:
        return

    resolved = resolve_log_level(level)
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(pkg_logger.handlers):
        if isinstance(existing, logging.NullHandler):
            pkg_logger.removeHandler(existing)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    pkg_logger.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger ``name``; silent until ``configure_logging`` runs."""
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
