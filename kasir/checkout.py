"""Checkout: record a sale and take its quantities out of stock.

Nothing here commits. Callers run ``checkout`` inside
``db.client.session_scope`` so an unknown product, short stock or a storage
error rolls back every row written for the sale.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from db.models.catalog import Transaction, TransactionDetail
from sqlalchemy import select
from sqlalchemy.orm import Session

from . import catalog
from .errors import (
    InsufficientStockError,
    InvalidRequestError,
    NotFoundError,
    UnknownProductError,
    storage_guard,
)
from .logging_setup import get_logger

logger = get_logger("kasir.checkout")


class CheckoutLine(Protocol):
    product_id: int
    quantity: int


def _validate_items(items: Sequence[CheckoutLine]) -> None:
    if not items:
        raise InvalidRequestError("checkout requires at least one item")
    for item in items:
        if item.quantity <= 0:
            raise InvalidRequestError(
                f"quantity must be > 0 (product {item.product_id}: {item.quantity})"
            )


@storage_guard("checkout")
def checkout(
    session: Session,
    items: Sequence[CheckoutLine],
    *,
    created_at: datetime | None = None,
) -> Transaction:
    """Persist one transaction for ``items`` and decrement stock accordingly.

    Items referencing the same product are kept as separate line items; their
    quantities accumulate into a single stock decrement. ``created_at`` defaults
    to the current local time.

    Raises
    ------
    InvalidRequestError
        ``items`` is empty or a quantity is not positive.
    UnknownProductError
        At least one ``product_id`` is not in the catalog.
    InsufficientStockError
        The summed quantity for a product exceeds its stock.
    PersistenceError
        The storage layer failed.
    """

    _validate_items(items)

    wanted = list(dict.fromkeys(item.product_id for item in items))
    products = {p.id: p for p in catalog.list_products(session, ids=wanted, for_update=True)}
    missing = [pid for pid in wanted if pid not in products]
    if missing:
        logger.warning("checkout rejected: unknown products %s", missing)
        raise UnknownProductError(missing)

    details: list[TransactionDetail] = []
    per_product: dict[int, int] = {}
    total_amount = 0
    for item in items:
        product = products[item.product_id]
        subtotal = product.price * item.quantity
        total_amount += subtotal
        details.append(
            TransactionDetail(
                product_id=product.id,
                product_name=product.name,
                quantity=item.quantity,
                subtotal=subtotal,
            )
        )
        per_product[product.id] = per_product.get(product.id, 0) + item.quantity

    for product_id, quantity in per_product.items():
        try:
            catalog.decrement_stock(session, product_id, quantity)
        except InsufficientStockError:
            logger.warning(
                "checkout rejected: insufficient stock for product %s (qty %s)",
                product_id,
                quantity,
            )
            raise

    transaction = Transaction(
        total_amount=total_amount,
        created_at=created_at or datetime.now(),
        details=details,
    )
    session.add(transaction)
    session.flush()

    logger.info(
        "checkout recorded transaction id=%s items=%d total=%d",
        transaction.id,
        len(details),
        total_amount,
    )
    return transaction


@storage_guard("get transaction")
def get_transaction(session: Session, transaction_id: int) -> Transaction:
    transaction = session.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFoundError(f"transaction not found: {transaction_id}")
    return transaction


@storage_guard("list transactions")
def list_transactions(
    session: Session,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Transaction]:
    """Return transactions with ``start <= created_at < end``, oldest first."""

    stmt = select(Transaction).order_by(Transaction.created_at, Transaction.id)
    if start is not None:
        stmt = stmt.where(Transaction.created_at >= start)
    if end is not None:
        stmt = stmt.where(Transaction.created_at < end)
    return list(session.scalars(stmt))


__all__ = ["CheckoutLine", "checkout", "get_transaction", "list_transactions"]
