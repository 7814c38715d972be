# ruff: noqa: I001
"""Sales ledger: transaction headers and their line items.

Revision ID: 0002_sales_ledger
Revises: 0001_catalog_core
Create Date: 2026-01-19
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_sales_ledger"
down_revision: str | None = "0001_catalog_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("total_amount", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=False),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    # Report windows filter on created_at
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"], unique=False)

    op.create_table(
        "transaction_details",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "transaction_id",
            sa.Integer(),
            sa.ForeignKey("transactions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey("products.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("product_name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("subtotal", sa.Integer(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_transaction_details_quantity_positive"),
    )
    op.create_index(
        "ix_transaction_details_transaction_id",
        "transaction_details",
        ["transaction_id"],
        unique=False,
    )
    op.create_index(
        "ix_transaction_details_product_id",
        "transaction_details",
        ["product_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_transaction_details_product_id", table_name="transaction_details")
    op.drop_index("ix_transaction_details_transaction_id", table_name="transaction_details")
    op.drop_table("transaction_details")
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_table("transactions")
