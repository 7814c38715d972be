"""DB helpers for tests: bootstrap a temporary SQLite DB and seed the catalog."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from db import Base
from db.client import get_engine, session_scope
from db.models.catalog import Category, Product, Transaction, TransactionDetail
from sqlalchemy import select


def bootstrap_sqlite_db(db_file: Path) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)
    return url


def seed_products(
    *,
    database_url: str,
    products: Iterable[Mapping[str, Any]],
    categories: Iterable[str] = (),
) -> dict[str, int]:
    """Insert categories and products; return ``{name: id}`` for both.

    Each product mapping takes ``name``, ``price``, ``stock`` and an optional
    ``categories`` list of category names.
    """

    ids: dict[str, int] = {}
    with session_scope(database_url=database_url) as session:
        by_name: dict[str, Category] = {}
        for name in categories:
            cat = Category(name=name, description=f"{name} items")
            session.add(cat)
            by_name[name] = cat
        session.flush()
        ids.update({name: c.id for name, c in by_name.items()})

        for row in products:
            product = Product(
                name=row["name"],
                price=row["price"],
                stock=row["stock"],
                categories=[by_name[c] for c in row.get("categories", ())],
            )
            session.add(product)
            session.flush()
            ids[row["name"]] = product.id
    return ids


def record_sale(
    *,
    database_url: str,
    created_at: datetime,
    lines: Iterable[tuple[int, str, int, int]],
) -> int:
    """Insert a ledger entry directly (no stock effect).

    ``lines`` holds ``(product_id, product_name, quantity, subtotal)`` tuples.
    """

    with session_scope(database_url=database_url) as session:
        details = [
            TransactionDetail(product_id=pid, product_name=name, quantity=qty, subtotal=sub)
            for pid, name, qty, sub in lines
        ]
        tx = Transaction(
            total_amount=sum(d.subtotal for d in details),
            created_at=created_at,
            details=details,
        )
        session.add(tx)
        session.flush()
        return tx.id


def stock_of(*, database_url: str, product_id: int) -> int:
    with session_scope(database_url=database_url) as session:
        return session.scalar(select(Product.stock).where(Product.id == product_id))


def count_rows(*, database_url: str, model: type) -> int:
    with session_scope(database_url=database_url) as session:
        return len(session.scalars(select(model)).all())
