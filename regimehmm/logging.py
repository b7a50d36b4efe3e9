"""Logging helpers for regimehmm.

Every module obtains its logger through :func:`get_logger`, so all engine
output lives under the ``regimehmm`` namespace and shares one level and one
output stream. The estimator reports per-iteration progress at DEBUG level and
recoverable diagnostics (non-convergence, degenerate states) at WARNING level.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

_NAMESPACE = "regimehmm"
_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

# Shared by every engine logger, including those created later.
_level = logging.WARNING
_stream: Optional[IO[str]] = None

_loggers: dict[str, logging.Logger] = {}


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def _install_handler(logger: logging.Logger) -> None:
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(_stream if _stream is not None else sys.stderr)
    handler.setLevel(_level)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the logger for ``name`` inside the ``regimehmm`` namespace.

    Args:
        name: Usually ``__name__`` of the calling module. Names outside the
            namespace are prefixed with ``regimehmm.``; None gives the
            package logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("EM iteration %d", 3)
    """
    if name is None or name == _NAMESPACE:
        logger_name = _NAMESPACE
    elif name.startswith(_NAMESPACE + "."):
        logger_name = name
    else:
        logger_name = f"{_NAMESPACE}.{name}"

    logger = _loggers.get(logger_name)
    if logger is None:
        logger = logging.getLogger(logger_name)
        _install_handler(logger)
        logger.propagate = False
        _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every regimehmm logger, existing and future.

    Args:
        level: A ``logging`` level constant or its name (``"DEBUG"``, ``"INFO"``, ...).
    """
    global _level
    _level = _coerce_level(level)
    for logger in _loggers.values():
        logger.setLevel(_level)
        for handler in logger.handlers:
            handler.setLevel(_level)


def configure_logging(level: int | str = logging.WARNING, stream: Optional[IO[str]] = None) -> None:
    """Route all regimehmm output to ``stream`` at ``level``.

    Args:
        level: Logging level (default: WARNING).
        stream: Output stream. None means ``sys.stderr`` at the time of logging
            setup.
    """
    global _level, _stream
    _level = _coerce_level(level)
    _stream = stream
    for logger in _loggers.values():
        _install_handler(logger)
