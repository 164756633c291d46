"""Logging configuration for ``statement_entities``.

Library modules only ever call ``get_logger("statement_entities.<module>")``;
until an entrypoint calls :func:`configure_logging` the package root logger
carries a ``NullHandler`` and stays silent. The CLI configures logging once per
process from its ``--verbose``/``--log-level`` options, falling back to the
``STATEMENT_ENTITIES_LOG_LEVEL`` environment variable and then ``WARNING``.

Bulk mapping mutations log at ``INFO``; dropped trim rules, per-row alignment
decisions and scan summaries log at ``DEBUG``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "statement_entities"
_LEVEL_ENV = "STATEMENT_ENTITIES_LOG_LEVEL"
_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def parse_level(level: int | str | None) -> int:
    """Resolve ``level`` to a numeric logging level.

    Accepts ints, numeric strings and level names in any case. ``None`` or an
    unknown name falls back to ``STATEMENT_ENTITIES_LOG_LEVEL`` and then to
    ``WARNING``.
    """

    if isinstance(level, int):
        return level
    if level is not None:
        text = level.strip().upper()
        if text.isdigit():
            return int(text)
        numeric = logging.getLevelNamesMapping().get(text)
        if numeric is not None:
            return numeric
    env_val = os.getenv(_LEVEL_ENV)
    if env_val and env_val.strip().upper() != (level or "").strip().upper():
        return parse_level(env_val)
    return _DEFAULT_LEVEL


def verbosity_level(verbose: int) -> int | None:
    """Map a ``-v`` count to a level: 1 is INFO, 2 or more is DEBUG."""

    if verbose <= 0:
        return None
    return logging.INFO if verbose == 1 else logging.DEBUG


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Attach a single ``StreamHandler`` to the package root logger.

    Calling again replaces the handler installed by the previous call, so the
    level can be raised or lowered at runtime. ``stream`` defaults to the
    current ``sys.stderr``.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or h is _handler:
            logger.removeHandler(h)

    resolved = parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    _handler = handler
    return logger


def reset_logging() -> None:
    """Remove the handler installed by :func:`configure_logging`."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "configure_logging",
    "get_logger",
    "parse_level",
    "reset_logging",
    "verbosity_level",
]
