from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: categories
# ---------------------------


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))


# Link table only; rows carry no payload of their own.
product_categories = Table(
    "product_categories",
    Base.metadata,
    Column(
        "product_id",
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


# ---------------------------
# Catalog: products
# ---------------------------


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Minor currency units (e.g. rupiah), never fractional.
    price: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    stock: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    categories: Mapped[list[Category]] = relationship(
        secondary=product_categories,
        order_by=Category.name,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )


# ---------------------------
# Ledger: transactions
# ---------------------------


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    # Naive local time; report windows are computed in the same clock.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, default=datetime.now, index=True
    )
    details: Mapped[list[TransactionDetail]] = relationship(
        back_populates="transaction",
        order_by="TransactionDetail.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class TransactionDetail(Base):
    __tablename__ = "transaction_details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # RESTRICT: a product with sales history cannot be deleted out from under
    # its ledger rows.
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # Snapshot of Product.name at checkout time. Never re-derived from the
    # live catalog.
    product_name: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False)

    transaction: Mapped[Transaction] = relationship(back_populates="details")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transaction_details_quantity_positive"),
    )


__all__ = [
    "Base",
    "Category",
    "Product",
    "Transaction",
    "TransactionDetail",
    "product_categories",
]
