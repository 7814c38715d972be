"""Pytest configuration for test isolation.

Every test that asks for ``db_url`` gets its own file-backed SQLite database
under ``tmp_path``. The shared engine in ``db.client`` is a process-wide
singleton that refuses a second URL, so it is disposed after each test;
likewise the package logger configuration is reset so later tests can use
``caplog``.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import dispose_engine

from kasir.logging_setup import reset_logging
from tests.helpers.db import bootstrap_sqlite_db, seed_products


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("KASIR_LOG_LEVEL", raising=False)
    yield
    dispose_engine()
    reset_logging()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "kasir-test.db")


@pytest.fixture
def catalog_ids(db_url: str) -> dict[str, int]:
    """Product A (price 1000, stock 5) and Product B (price 500, stock 10)."""

    return seed_products(
        database_url=db_url,
        categories=["Minuman", "Makanan"],
        products=[
            {"name": "Product A", "price": 1000, "stock": 5, "categories": ["Minuman"]},
            {"name": "Product B", "price": 500, "stock": 10, "categories": ["Makanan"]},
        ],
    )
