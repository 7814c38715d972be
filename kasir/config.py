"""Runtime settings for the ``kasir`` service.

Values come from the process environment, optionally seeded from a ``.env``
file via ``python-dotenv`` (existing variables are never overridden).

Environment variables
---------------------
- ``DATABASE_URL``: SQLAlchemy URL of the catalog/ledger database (required
  to serve requests).
- ``KASIR_HOST`` / ``KASIR_PORT``: bind address for ``kasir serve``
  (defaults ``0.0.0.0`` / ``8080``).
- ``KASIR_LOG_LEVEL``: level name or number for the package logger.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str | None = None


def _port_from_env(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError as e:
        raise RuntimeError(f"KASIR_PORT must be an integer, got {raw!r}") from e
    if not 0 < port < 65536:
        raise RuntimeError(f"KASIR_PORT out of range: {port}")
    return port


def load_settings(*, dotenv_path: Path | None = None, database_url: str | None = None) -> Settings:
    """Build :class:`Settings` from ``.env`` + environment.

    ``database_url`` overrides ``DATABASE_URL`` when given (CLI flag).
    """

    load_dotenv(dotenv_path=dotenv_path or Path.cwd() / ".env", override=False)
    return Settings(
        database_url=database_url or os.getenv("DATABASE_URL") or None,
        host=os.getenv("KASIR_HOST") or DEFAULT_HOST,
        port=_port_from_env(os.getenv("KASIR_PORT")),
        log_level=os.getenv("KASIR_LOG_LEVEL") or None,
    )


__all__ = ["Settings", "load_settings"]
