"""
Logging utilities for depscribe.

Every depscribe module logs through a logger obtained from
:func:`get_logger`, which places it under the ``depscribe`` namespace. The
library never configures handlers on import; only the CLI calls
:func:`setup_logging`.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from depscribe.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "depscribe"

_logging_configured: bool = False
_lock = threading.Lock()


def color_enabled(stream: Optional[IO[str]]) -> bool:
    """Return True if ``stream`` is a terminal and neither NO_COLOR nor CI is set.

    Shared by the log formatter and the Rich console so both agree on when
    escape codes may be written.
    """
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return bool(stream is not None and stream.isatty())
    except (AttributeError, OSError, ValueError):
        return False


class ColoredFormatter(logging.Formatter):
    """Logging formatter that colors the level name on a terminal.

    Args:
        fmt: Log record format.
        datefmt: Timestamp format.
        use_color: Set False to never color, whatever the stream.
        stream: Stream the handler writes to; ``sys.stderr`` when omitted.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
        stream: Optional[IO[str]] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color
        self.stream = stream

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if color and self.use_color and color_enabled(self.stream or sys.stderr):
            # Work on a copy so other handlers see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


def level_for_verbosity(verbose: int) -> int:
    """Map a ``-v`` count to a logging level.

    ``0`` is WARNING, ``1`` is INFO, anything higher is DEBUG.
    """
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure the ``depscribe`` logger hierarchy.

    Safe to call repeatedly; previous handlers are replaced.

    Args:
        level: Logging level (e.g. ``logging.DEBUG``).
        verbose: Use the verbose format with timestamps and logger names.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        output = stream or sys.stderr
        handler = logging.StreamHandler(output)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                stream=output,
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the ``depscribe`` namespace.

    Args:
        name: Logger name. ``"core.extractor"`` and
            ``"depscribe.core.extractor"`` resolve to the same logger.

    Returns:
        A logger under the ``depscribe`` hierarchy.
    """
    if not name or name == ROOT_LOGGER_NAME:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
    elif name.startswith(f"{ROOT_LOGGER_NAME}."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True if :func:`setup_logging` has run."""
    return _logging_configured
