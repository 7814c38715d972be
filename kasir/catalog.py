"""Catalog store: categories and products.

All functions take an active SQLAlchemy ``Session``; callers own the
transaction scope (``db.client.session_scope``). Nothing here commits.

The checkout engine reads and writes stock exclusively through
:func:`list_products` and :func:`decrement_stock`, so every product mutation
in the service goes through this module.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from db.models.catalog import Category, Product, TransactionDetail
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from .errors import (
    ConflictError,
    InsufficientStockError,
    InvalidRequestError,
    NotFoundError,
    storage_guard,
)
from .logging_setup import get_logger

logger = get_logger("kasir.catalog")


# ---------------------------
# Categories
# ---------------------------


@storage_guard("list categories")
def list_categories(session: Session) -> list[Category]:
    return list(session.scalars(select(Category).order_by(Category.id)))


@storage_guard("get category")
def get_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if category is None:
        raise NotFoundError(f"category not found: {category_id}")
    return category


@storage_guard("create category")
def create_category(session: Session, *, name: str, description: str = "") -> Category:
    category = Category(name=name, description=description)
    session.add(category)
    session.flush()
    logger.debug("created category id=%s name=%r", category.id, name)
    return category


@storage_guard("update category")
def update_category(
    session: Session, category_id: int, *, name: str, description: str = ""
) -> Category:
    category = get_category(session, category_id)
    category.name = name
    category.description = description
    session.flush()
    return category


@storage_guard("delete category")
def delete_category(session: Session, category_id: int) -> None:
    category = get_category(session, category_id)
    session.delete(category)
    session.flush()
    logger.debug("deleted category id=%s", category_id)


def _resolve_categories(session: Session, category_ids: Iterable[int]) -> list[Category]:
    """Load categories for ``category_ids`` (order preserved, duplicates dropped)."""

    wanted = list(dict.fromkeys(category_ids))
    if not wanted:
        return []
    found = {c.id: c for c in session.scalars(select(Category).where(Category.id.in_(wanted)))}
    missing = [i for i in wanted if i not in found]
    if missing:
        raise NotFoundError("category not found: " + ", ".join(str(i) for i in missing))
    return [found[i] for i in wanted]


# ---------------------------
# Products
# ---------------------------


def _check_amounts(price: int, stock: int) -> None:
    if price < 0:
        raise InvalidRequestError("price must be >= 0")
    if stock < 0:
        raise InvalidRequestError("stock must be >= 0")


@storage_guard("list products")
def list_products(
    session: Session,
    *,
    ids: Sequence[int] | None = None,
    name: str | None = None,
    for_update: bool = False,
) -> list[Product]:
    """Return products ordered by id, optionally filtered.

    Parameters
    ----------
    ids:
        Restrict to these product ids. An empty sequence yields no rows.
    name:
        Case-insensitive substring match on the product name.
    for_update:
        Lock the selected rows until the surrounding transaction ends
        (``SELECT ... FOR UPDATE``; ignored by engines without row locks).
    """

    stmt = select(Product).order_by(Product.id)
    if ids is not None:
        if not ids:
            return []
        stmt = stmt.where(Product.id.in_(list(ids)))
    if name:
        stmt = stmt.where(Product.name.ilike(f"%{name.strip()}%"))
    if for_update:
        stmt = stmt.with_for_update()
    return list(session.scalars(stmt))


@storage_guard("get product")
def get_product(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        raise NotFoundError(f"product not found: {product_id}")
    return product


@storage_guard("create product")
def create_product(
    session: Session,
    *,
    name: str,
    price: int,
    stock: int,
    category_ids: Iterable[int] = (),
) -> Product:
    _check_amounts(price, stock)
    product = Product(
        name=name,
        price=price,
        stock=stock,
        categories=_resolve_categories(session, category_ids),
    )
    session.add(product)
    session.flush()
    logger.debug("created product id=%s name=%r", product.id, name)
    return product


@storage_guard("update product")
def update_product(
    session: Session,
    product_id: int,
    *,
    name: str,
    price: int,
    stock: int,
    category_ids: Iterable[int] = (),
) -> Product:
    """Overwrite a product's fields and replace its category links."""

    _check_amounts(price, stock)
    product = get_product(session, product_id)
    product.name = name
    product.price = price
    product.stock = stock
    product.categories = _resolve_categories(session, category_ids)
    session.flush()
    return product


@storage_guard("delete product")
def delete_product(session: Session, product_id: int) -> None:
    product = get_product(session, product_id)
    sold = session.scalar(
        select(func.count())
        .select_from(TransactionDetail)
        .where(TransactionDetail.product_id == product_id)
    )
    if sold:
        raise ConflictError(
            f"product {product_id} has sales history and cannot be deleted"
        )
    session.delete(product)
    session.flush()
    logger.debug("deleted product id=%s", product_id)


@storage_guard("update stock")
def decrement_stock(session: Session, product_id: int, quantity: int) -> None:
    """Atomically subtract ``quantity`` from a product's stock.

    The write is conditional (``... WHERE stock >= :quantity``) so concurrent
    checkouts can never drive stock below zero, whatever the isolation level.
    """

    if quantity <= 0:
        raise InvalidRequestError("quantity must be > 0")
    result = session.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    product = session.get(Product, product_id)
    if result.rowcount == 0:
        if product is None:
            raise NotFoundError(f"product not found: {product_id}")
        raise InsufficientStockError(product_id, quantity)
    if product is not None:
        # Reload the stored value on next access.
        session.expire(product, ["stock"])


__all__ = [
    "create_category",
    "create_product",
    "decrement_stock",
    "delete_category",
    "delete_product",
    "get_category",
    "get_product",
    "list_categories",
    "list_products",
    "update_category",
    "update_product",
]
