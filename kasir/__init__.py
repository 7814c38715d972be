"""Catalog, checkout and sales reporting service.

The engines are exposed as submodules (``kasir.catalog``, ``kasir.checkout``,
``kasir.reporting``); only the error taxonomy is re-exported here.
"""

from . import catalog, checkout, reporting
from .errors import (
    ConflictError,
    InsufficientStockError,
    InvalidDateFormatError,
    InvalidDateRangeError,
    InvalidRequestError,
    KasirError,
    NotFoundError,
    PersistenceError,
    UnknownProductError,
)

__all__ = [
    "catalog",
    "checkout",
    "reporting",
    "KasirError",
    "NotFoundError",
    "UnknownProductError",
    "InvalidRequestError",
    "InvalidDateFormatError",
    "InvalidDateRangeError",
    "ConflictError",
    "InsufficientStockError",
    "PersistenceError",
]
