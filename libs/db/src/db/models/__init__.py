"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the catalog and sales ledger models used by ``kasir``.
"""

from .catalog import Base, Category, Product, Transaction, TransactionDetail, product_categories

__all__ = [
    "Base",
    "Category",
    "Product",
    "Transaction",
    "TransactionDetail",
    "product_categories",
]
