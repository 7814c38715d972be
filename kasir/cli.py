"""CLI for the ``kasir`` package.

Typer-based console interface. Environment variables (notably
``DATABASE_URL``) are loaded from a local ``.env`` via ``python-dotenv``
before any command runs. Business logic lives in ``kasir.catalog``,
``kasir.checkout`` and ``kasir.reporting``; the HTTP surface in ``kasir.web``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from dotenv import load_dotenv

from .config import load_settings
from .errors import KasirError
from .logging_setup import configure_logging, get_logger

app = typer.Typer(add_completion=False, help="Catalog, checkout and sales reporting service.")

logger = get_logger("kasir.cli")


@app.command("serve")
def serve_cmd(
    *,
    host: str | None = typer.Option(None, help="Bind address (default KASIR_HOST or 0.0.0.0)."),
    port: int | None = typer.Option(None, help="Bind port (default KASIR_PORT or 8080)."),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Run the HTTP API under uvicorn."""

    # Deferred imports keep `kasir --help` fast
    import uvicorn

    from .web import create_app

    settings = load_settings(database_url=database_url)
    api = create_app(settings)
    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("serving on %s:%s (docs at /docs)", bind_host, bind_port)
    uvicorn.run(api, host=bind_host, port=bind_port, log_config=None)


@app.command("init-db")
def init_db_cmd(
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Create any missing tables from the ORM metadata.

    Intended for local development and SQLite files; production schemas are
    managed by the Alembic migrations in ``libs/db``.
    """

    from db import metadata
    from db.client import get_engine

    settings = load_settings(database_url=database_url)
    engine = get_engine(database_url=settings.database_url)
    metadata.create_all(bind=engine)
    typer.echo(f"Schema ready on {engine.url.render_as_string()}")


@app.command("report")
def report_cmd(
    *,
    start_date: str | None = typer.Option(None, help="Window start, YYYY-MM-DD (default today)."),
    end_date: str | None = typer.Option(None, help="Window end, YYYY-MM-DD (default today)."),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Print the sales report for a date window as JSON."""

    from db.client import session_scope

    from .reporting import get_report

    settings = load_settings(database_url=database_url)
    try:
        with session_scope(database_url=settings.database_url) as session:
            report = get_report(session, start_date, end_date)
    except KasirError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        raise typer.Exit(1) from e
    typer.echo(report.model_dump_json(indent=2))


@app.callback()
def _root(
    *,
    log_level: str | None = typer.Option(
        None, help="Log level (default KASIR_LOG_LEVEL or INFO)."
    ),
) -> None:
    """Root callback.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
