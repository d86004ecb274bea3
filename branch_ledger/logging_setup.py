"""Logging for ``branch_ledger``.

All modules log through child loggers of ``"branch_ledger"`` obtained with
:func:`get_logger`, using short ``area:event key=value`` messages (for example
``opening_balance:missing; assumed zero`` or ``export:written path=...``).

Only entrypoints call :func:`configure_logging`. Until they do, the package
logger carries a ``NullHandler`` and records still propagate to the root
logger, so a host application's own handlers (or pytest's ``caplog``) see
them. Once configured, the package logger owns a single stderr handler and
stops propagating.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "branch_ledger"
LOG_LEVEL_ENV = "BRANCH_LEDGER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_CONFIGURED = False


def _resolve_level(level: int | str | None) -> int:
    """Level from ``level``, else ``$BRANCH_LEDGER_LOG_LEVEL``, else INFO.

    Unknown names fall back to INFO rather than failing the CLI.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    mapped = logging.getLevelNamesMapping().get(name)
    return mapped if mapped is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach the package's stderr handler; repeated calls are no-ops."""

    global _CONFIGURED
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _CONFIGURED:
        return logger

    resolved = _resolve_level(level)
    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False

    _CONFIGURED = True
    return logger


def reset_logging() -> None:
    """Drop handlers added by :func:`configure_logging` and restore propagation."""

    global _CONFIGURED
    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _CONFIGURED = False


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if not _CONFIGURED and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "reset_logging", "get_logger", "LOG_LEVEL_ENV"]
