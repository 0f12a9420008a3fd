"""Centralized logging configuration for the ``statement_parser`` package.

Two public helpers:

- ``configure_logging(...)``: attach a single ``StreamHandler`` to the package
  root logger (``"statement_parser"``). Called once by entrypoints (the CLI)
  at process startup.
- ``get_logger(name)``: acquire a logger by name, making sure the package root
  logger has at least a ``NullHandler`` when nothing configured it, so library
  use stays silent.

Library modules never attach their own handlers; they call
``get_logger("statement_parser.<module>")`` and rely on the host application.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "statement_parser"
_LEVEL_ENV_VAR = "STATEMENT_PARSER_LOG_LEVEL"
_CONFIGURED = False


def _coerce_level(level: int | str | None) -> int | None:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        # Numeric strings or standard level names (INFO/DEBUG/etc.).
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = getattr(logging, name, None)
        if isinstance(numeric, int):
            return numeric
    return None


def _parse_level(level: int | str | None) -> int:
    resolved = _coerce_level(level)
    if resolved is not None:
        return resolved
    env_level = _coerce_level(os.getenv(_LEVEL_ENV_VAR))
    if env_level is not None:
        return env_level
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        Logging level as ``int`` or level-name string (e.g., ``"DEBUG"``). If
        ``None``, defaults to ``STATEMENT_PARSER_LOG_LEVEL`` when set,
        otherwise ``logging.INFO``.
    fmt:
        Optional format string. Defaults to
        ``"%(asctime)s %(name)s %(levelname)s %(message)s"``.
    stream:
        Output stream for the handler (defaults to ``sys.stderr``).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    # NullHandlers added by get_logger() would otherwise linger.
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(
        logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def set_log_level(level: int | str) -> None:
    """Change the level of the package logger and its handlers after configuration."""

    resolved = _parse_level(level)
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    logger.setLevel(resolved)
    for h in logger.handlers:
        h.setLevel(resolved)


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, with a silent default for library use."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "set_log_level"]
