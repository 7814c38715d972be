from __future__ import annotations

import io
import logging

import pytest

from kasir.logging_setup import configure_logging, get_logger


def test_get_logger_is_silent_until_configured() -> None:
    get_logger("kasir.anything")
    handlers = logging.getLogger("kasir").handlers
    assert handlers and all(isinstance(h, logging.NullHandler) for h in handlers)


def test_configure_logging_once(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KASIR_LOG_LEVEL", "warning")
    first, second = io.StringIO(), io.StringIO()

    configure_logging(stream=first)
    configure_logging(level="DEBUG", stream=second)  # ignored: already configured

    log = get_logger("kasir.checkout")
    log.info("hidden")
    log.warning("shown")

    assert "shown" in first.getvalue()
    assert "hidden" not in first.getvalue()
    assert second.getvalue() == ""
    pkg = logging.getLogger("kasir")
    assert pkg.level == logging.WARNING
    assert not pkg.propagate


def test_uvicorn_loggers_share_the_package_handler() -> None:
    out = io.StringIO()
    configure_logging(level="INFO", stream=out)

    get_logger("kasir.web").info("app line")
    logging.getLogger("uvicorn.error").info("Application startup complete.")
    logging.getLogger("uvicorn.access").info(
        '%s - "%s %s HTTP/%s" %d', "127.0.0.1:5000", "GET", "/health", "1.1", 200
    )

    lines = out.getvalue().splitlines()
    assert len(lines) == 3
    assert "kasir.web: app line" in lines[0]
    assert "uvicorn.error: Application startup complete." in lines[1]
    assert '"GET /health HTTP/1.1" 200' in lines[2]
