"""Process-wide logging for the service.

One ``StreamHandler`` is shared by the ``kasir`` package logger and by the
uvicorn loggers, so application lines and access lines come out in a single
format on a single stream. ``kasir serve`` passes ``log_config=None`` to
uvicorn so that it leaves these loggers alone.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "kasir"
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def _resolve_level(level: int | str | None) -> int:
    raw = level if level is not None else os.getenv("KASIR_LOG_LEVEL", "")
    if isinstance(raw, int):
        return raw
    name = raw.strip().upper()
    if name.isdigit():
        return int(name)
    mapped = logging.getLevelNamesMapping().get(name)
    return mapped if mapped is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str = DEFAULT_FORMAT,
    stream: IO[str] = sys.stderr,
) -> None:
    """Install the shared handler; later calls are no-ops.

    ``level`` falls back to ``KASIR_LOG_LEVEL`` and then INFO.
    """

    global _handler
    if _handler is not None:
        return

    resolved = _resolve_level(level)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))

    for name in (PACKAGE_LOGGER, *SERVER_LOGGERS):
        logger = logging.getLogger(name)
        logger.handlers = [handler] if name != "uvicorn.error" else []
        logger.setLevel(resolved)
        # uvicorn.error reaches the handler through its "uvicorn" parent
        logger.propagate = name == "uvicorn.error"

    _handler = handler


def reset_logging() -> None:
    """Detach the shared handler again (used between tests)."""

    global _handler
    for name in (PACKAGE_LOGGER, *SERVER_LOGGERS):
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
    _handler = None


def get_logger(name: str) -> logging.Logger:
    """Return ``name``'s logger; output is silent until :func:`configure_logging`."""

    root = logging.getLogger(PACKAGE_LOGGER)
    if _handler is None and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
