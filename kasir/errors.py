"""Error taxonomy for ``kasir``.

Every error raised by the catalog, checkout and reporting layers derives from
:class:`KasirError` and carries the HTTP status the web layer should answer
with. Storage-layer exceptions are wrapped in :class:`PersistenceError` (with
the original chained via ``raise ... from``) and never retried.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import SQLAlchemyError

P = ParamSpec("P")
R = TypeVar("R")


class KasirError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(KasirError):
    """A referenced category, product or transaction does not exist."""

    status_code = 404


class UnknownProductError(NotFoundError):
    """A checkout referenced product ids that are not in the catalog."""

    def __init__(self, product_ids: list[int]) -> None:
        ids = ", ".join(str(i) for i in product_ids)
        super().__init__(f"product not found: {ids}")
        self.product_ids = product_ids


class InvalidRequestError(KasirError):
    """The request is well-formed JSON but semantically unusable."""

    status_code = 400


class InvalidDateFormatError(InvalidRequestError):
    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Invalid {field} format {value!r}. Use YYYY-MM-DD")
        self.field = field
        self.value = value


class InvalidDateRangeError(InvalidRequestError):
    def __init__(self) -> None:
        super().__init__("start_date must be before end_date")


class ConflictError(KasirError):
    """The write would break a catalog or ledger consistency rule."""

    status_code = 409


class InsufficientStockError(ConflictError):
    def __init__(self, product_id: int, requested: int) -> None:
        super().__init__(
            f"insufficient stock for product {product_id}: requested {requested}"
        )
        self.product_id = product_id
        self.requested = requested


class PersistenceError(KasirError):
    """The underlying storage failed."""

    status_code = 500


def storage_guard(action: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Re-raise storage exceptions from the wrapped call as :class:`PersistenceError`."""

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return fn(*args, **kwargs)
            except SQLAlchemyError as e:
                raise PersistenceError(f"{action} failed: {e}") from e

        return wrapper

    return decorator


__all__ = [
    "ConflictError",
    "InsufficientStockError",
    "InvalidDateFormatError",
    "InvalidDateRangeError",
    "InvalidRequestError",
    "KasirError",
    "NotFoundError",
    "PersistenceError",
    "UnknownProductError",
    "storage_guard",
]
