# ruff: noqa: I001
"""Add ``occurrence`` to the transaction dedup key.

Identical ``(date, amount, original_label)`` rows in one account (two coffees
on the same day) were rejected by the old unique index. Existing rows become
occurrence 1.

Revision ID: 0002_transaction_occurrence
Revises: 0001_core
Create Date: 2026-02-22
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_transaction_occurrence"
down_revision: str | None = "0001_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    with op.batch_alter_table("transactions") as batch:
        batch.add_column(
            sa.Column("occurrence", sa.Integer(), nullable=False, server_default=sa.text("1"))
        )
        batch.create_check_constraint("ck_transactions_occurrence", "occurrence >= 1")
        batch.drop_index("uq_transactions_account_date_amount_label")
        batch.create_unique_constraint(
            "uq_transactions_account_date_amount_label_occ",
            ["account_id", "date", "amount", "original_label", "occurrence"],
        )


def downgrade() -> None:
    with op.batch_alter_table("transactions") as batch:
        batch.drop_constraint("uq_transactions_account_date_amount_label_occ", type_="unique")
        batch.create_index(
            "uq_transactions_account_date_amount_label",
            ["account_id", "date", "amount", "original_label"],
            unique=True,
        )
        batch.drop_constraint("ck_transactions_occurrence", type_="check")
        batch.drop_column("occurrence")
