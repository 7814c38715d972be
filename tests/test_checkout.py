from __future__ import annotations

import logging
from datetime import datetime

import pytest
from db.client import session_scope
from db.models.catalog import Product, Transaction, TransactionDetail

from kasir.checkout import checkout, get_transaction, list_transactions
from kasir.errors import (
    InsufficientStockError,
    InvalidRequestError,
    NotFoundError,
    UnknownProductError,
)
from kasir.schemas import CheckoutItem
from tests.helpers.db import count_rows, stock_of


def _items(*pairs: tuple[int, int]) -> list[CheckoutItem]:
    return [CheckoutItem(product_id=pid, quantity=qty) for pid, qty in pairs]


def test_checkout_totals_and_stock(db_url: str, catalog_ids: dict[str, int]) -> None:
    a, b = catalog_ids["Product A"], catalog_ids["Product B"]

    with session_scope(database_url=db_url) as session:
        tx = checkout(session, _items((a, 2), (b, 3)))

    assert tx.id is not None
    assert isinstance(tx.created_at, datetime)
    assert tx.total_amount == 2 * 1000 + 3 * 500 == 3500
    assert [(d.product_id, d.quantity, d.subtotal) for d in tx.details] == [
        (a, 2, 2000),
        (b, 3, 1500),
    ]
    assert sum(d.subtotal for d in tx.details) == tx.total_amount
    assert all(d.transaction_id == tx.id for d in tx.details)

    assert stock_of(database_url=db_url, product_id=a) == 3
    assert stock_of(database_url=db_url, product_id=b) == 7


def test_unknown_product_rolls_back_everything(
    db_url: str, catalog_ids: dict[str, int]
) -> None:
    a = catalog_ids["Product A"]
    missing = 9999

    with pytest.raises(UnknownProductError) as excinfo:
        with session_scope(database_url=db_url) as session:
            checkout(session, _items((a, 2), (missing, 1)))

    assert excinfo.value.product_ids == [missing]
    assert isinstance(excinfo.value, NotFoundError)
    assert stock_of(database_url=db_url, product_id=a) == 5
    assert count_rows(database_url=db_url, model=Transaction) == 0
    assert count_rows(database_url=db_url, model=TransactionDetail) == 0


def test_repeated_product_accumulates_decrement(
    db_url: str, catalog_ids: dict[str, int]
) -> None:
    b = catalog_ids["Product B"]

    with session_scope(database_url=db_url) as session:
        tx = checkout(session, _items((b, 4), (b, 5)))

    # Separate line items, one combined stock write-back
    assert len(tx.details) == 2
    assert tx.total_amount == 9 * 500
    assert stock_of(database_url=db_url, product_id=b) == 1


def test_oversell_is_rejected_atomically(db_url: str, catalog_ids: dict[str, int]) -> None:
    a, b = catalog_ids["Product A"], catalog_ids["Product B"]

    # B alone is fine, but A (stock 5) is requested 3 + 3 times.
    with pytest.raises(InsufficientStockError) as excinfo:
        with session_scope(database_url=db_url) as session:
            checkout(session, _items((b, 1), (a, 3), (a, 3)))

    assert excinfo.value.product_id == a
    assert excinfo.value.requested == 6
    assert stock_of(database_url=db_url, product_id=a) == 5
    assert stock_of(database_url=db_url, product_id=b) == 10
    assert count_rows(database_url=db_url, model=Transaction) == 0


def test_checkout_can_drain_stock_to_zero(db_url: str, catalog_ids: dict[str, int]) -> None:
    a = catalog_ids["Product A"]

    with session_scope(database_url=db_url) as session:
        checkout(session, _items((a, 5)))

    assert stock_of(database_url=db_url, product_id=a) == 0

    with pytest.raises(InsufficientStockError):
        with session_scope(database_url=db_url) as session:
            checkout(session, _items((a, 1)))
    assert count_rows(database_url=db_url, model=Transaction) == 1


@pytest.mark.parametrize("quantity", [0, -3])
def test_non_positive_quantity_rejected(
    db_url: str, catalog_ids: dict[str, int], quantity: int
) -> None:
    a = catalog_ids["Product A"]

    with pytest.raises(InvalidRequestError, match="quantity must be > 0"):
        with session_scope(database_url=db_url) as session:
            checkout(session, _items((a, quantity)))

    assert stock_of(database_url=db_url, product_id=a) == 5


def test_empty_checkout_rejected(db_url: str, catalog_ids: dict[str, int]) -> None:
    with pytest.raises(InvalidRequestError, match="at least one item"):
        with session_scope(database_url=db_url) as session:
            checkout(session, [])
    assert count_rows(database_url=db_url, model=Transaction) == 0


def test_detail_snapshot_survives_catalog_edits(
    db_url: str, catalog_ids: dict[str, int]
) -> None:
    a = catalog_ids["Product A"]

    with session_scope(database_url=db_url) as session:
        tx_id = checkout(session, _items((a, 1))).id

    with session_scope(database_url=db_url) as session:
        product = session.get(Product, a)
        assert product is not None
        product.name = "Product A (renamed)"
        product.price = 2500

    with session_scope(database_url=db_url) as session:
        tx = get_transaction(session, tx_id)
        detail = tx.details[0]
        assert detail.product_name == "Product A"
        assert detail.subtotal == 1000
        assert tx.total_amount == 1000


def test_get_transaction_missing(db_url: str) -> None:
    with session_scope(database_url=db_url) as session:
        with pytest.raises(NotFoundError, match="transaction not found"):
            get_transaction(session, 42)


def test_list_transactions_filters_by_created_at(
    db_url: str, catalog_ids: dict[str, int]
) -> None:
    b = catalog_ids["Product B"]
    with session_scope(database_url=db_url) as session:
        checkout(session, _items((b, 1)), created_at=datetime(2025, 3, 1, 9, 0))
        checkout(session, _items((b, 1)), created_at=datetime(2025, 3, 2, 9, 0))
        checkout(session, _items((b, 1)), created_at=datetime(2025, 3, 3, 0, 0))

    with session_scope(database_url=db_url) as session:
        rows = list_transactions(
            session, start=datetime(2025, 3, 1), end=datetime(2025, 3, 3)
        )
        assert [t.created_at.day for t in rows] == [1, 2]


def test_checkout_logs_recorded_transaction(
    db_url: str, catalog_ids: dict[str, int], caplog: pytest.LogCaptureFixture
) -> None:
    a = catalog_ids["Product A"]
    caplog.set_level(logging.INFO, logger="kasir.checkout")

    with session_scope(database_url=db_url) as session:
        checkout(session, _items((a, 1)))

    assert any("checkout recorded transaction" in r.getMessage() for r in caplog.records)


def test_stale_read_cannot_oversell(db_url: str, catalog_ids: dict[str, int]) -> None:
    """A session holding a pre-checkout view of stock still cannot oversell."""

    from db.client import get_session

    from kasir import catalog

    a = catalog_ids["Product A"]
    stale = get_session(database_url=db_url)
    try:
        (product,) = catalog.list_products(stale, ids=[a])
        assert product.stock == 5
        stale.commit()  # release SQLite's read transaction

        with session_scope(database_url=db_url) as session:
            checkout(session, _items((a, 4)))

        # In-memory view still says 5; the conditional write refuses.
        assert product.stock == 5
        with pytest.raises(InsufficientStockError):
            catalog.decrement_stock(stale, a, 3)
        stale.rollback()
    finally:
        stale.close()

    assert stock_of(database_url=db_url, product_id=a) == 1


def test_package_exposes_checkout_module() -> None:
    import inspect

    import kasir

    assert inspect.ismodule(kasir.checkout)
    assert kasir.checkout.checkout is checkout
