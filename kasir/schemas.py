"""Request/response models for the HTTP surface.

Pydantic only coerces types here; semantic checks (positive quantities,
non-negative prices, date ranges) live in the catalog/checkout/reporting
modules so the CLI and the web layer share them.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CategoryIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    description: str = ""


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str


class CategoryRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ProductIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    price: int
    stock: int
    # Category ids; replaces the product's links on update.
    categories: list[int] = Field(default_factory=list)


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: int
    stock: int
    categories: list[CategoryRef] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


class CheckoutItem(BaseModel):
    product_id: int
    quantity: int


class CheckoutRequest(BaseModel):
    items: list[CheckoutItem]


class TransactionDetailOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_id: int
    product_id: int
    product_name: str
    quantity: int
    subtotal: int


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    total_amount: int
    created_at: datetime
    details: list[TransactionDetailOut] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


class BestSeller(BaseModel):
    """Best-selling product within a report window."""

    nama: str
    qty_terjual: int


class Report(BaseModel):
    """Aggregates over a report window.

    ``total_transaksi`` counts line items (detail rows), not transaction
    headers. An empty window yields zeros and ``product_terlaris=None``.
    """

    total_revenue: int = 0
    total_transaksi: int = 0
    product_terlaris: BestSeller | None = None


class ErrorBody(BaseModel):
    error: str


__all__ = [
    "BestSeller",
    "CategoryIn",
    "CategoryOut",
    "CategoryRef",
    "CheckoutItem",
    "CheckoutRequest",
    "ErrorBody",
    "ProductIn",
    "ProductOut",
    "Report",
    "TransactionDetailOut",
    "TransactionOut",
]
