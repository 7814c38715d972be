"""Sales reporting over a date window.

Windows are half-open ``[start 00:00, day after end 00:00)`` in naive local
time, the same clock ``Transaction.created_at`` is written in. Both bounds
default to today.

Report semantics
----------------
- ``total_revenue``: sum of detail subtotals in the window.
- ``total_transaksi``: number of detail rows (line items) in the window, not
  transaction headers.
- ``product_terlaris``: product with the largest summed quantity in the
  window; ties go to the lowest product id. The name is the most recent
  snapshot recorded on a detail row, never the live catalog name.
- An empty window yields a zero report with ``product_terlaris=None``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from db.models.catalog import Transaction, TransactionDetail
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .errors import InvalidDateFormatError, InvalidDateRangeError, storage_guard
from .logging_setup import get_logger
from .schemas import BestSeller, Report

logger = get_logger("kasir.reporting")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True, slots=True)
class ReportWindow:
    start: datetime
    """Inclusive lower bound."""
    end: datetime
    """Exclusive upper bound."""


def _parse_date(field: str, raw: str | date | None) -> date | None:
    if raw is None:
        return None
    if isinstance(raw, date):
        return raw
    s = raw.strip()
    if not s:
        return None
    if not _DATE_RE.match(s):
        raise InvalidDateFormatError(field, raw)
    try:
        return date.fromisoformat(s)
    except ValueError as e:
        raise InvalidDateFormatError(field, raw) from e


def resolve_window(
    start_date: str | date | None = None,
    end_date: str | date | None = None,
    *,
    today: date | None = None,
) -> ReportWindow:
    """Resolve optional ``YYYY-MM-DD`` bounds into a concrete window.

    Raises
    ------
    InvalidDateFormatError
        Either bound is present but not a valid ``YYYY-MM-DD`` date.
    InvalidDateRangeError
        The resolved start date falls after the resolved end date.
    """

    today = today or date.today()
    start = _parse_date("start_date", start_date) or today
    end = _parse_date("end_date", end_date) or today
    if start > end:
        raise InvalidDateRangeError()
    return ReportWindow(
        start=datetime.combine(start, time.min),
        end=datetime.combine(end + timedelta(days=1), time.min),
    )


def _in_window(window: ReportWindow):
    return (Transaction.created_at >= window.start) & (Transaction.created_at < window.end)


def _best_seller(session: Session, window: ReportWindow) -> BestSeller | None:
    qty = func.sum(TransactionDetail.quantity).label("qty")
    row = session.execute(
        select(TransactionDetail.product_id, qty)
        .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
        .where(_in_window(window))
        .group_by(TransactionDetail.product_id)
        .order_by(qty.desc(), TransactionDetail.product_id)
        .limit(1)
    ).first()
    if row is None:
        return None
    product_id, total_qty = row
    name = session.scalar(
        select(TransactionDetail.product_name)
        .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
        .where(_in_window(window), TransactionDetail.product_id == product_id)
        .order_by(TransactionDetail.id.desc())
        .limit(1)
    )
    return BestSeller(nama=name or "", qty_terjual=int(total_qty))


@storage_guard("build report")
def build_report(session: Session, window: ReportWindow) -> Report:
    revenue, line_items = session.execute(
        select(
            func.coalesce(func.sum(TransactionDetail.subtotal), 0),
            func.count(TransactionDetail.id),
        )
        .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
        .where(_in_window(window))
    ).one()
    if not line_items:
        logger.debug("no sales between %s and %s", window.start, window.end)
        return Report()
    return Report(
        total_revenue=int(revenue),
        total_transaksi=int(line_items),
        product_terlaris=_best_seller(session, window),
    )


def get_report(
    session: Session,
    start_date: str | date | None = None,
    end_date: str | date | None = None,
    *,
    today: date | None = None,
) -> Report:
    """Resolve the window from raw query values and aggregate it."""

    window = resolve_window(start_date, end_date, today=today)
    return build_report(session, window)


__all__ = ["ReportWindow", "build_report", "get_report", "resolve_window"]
