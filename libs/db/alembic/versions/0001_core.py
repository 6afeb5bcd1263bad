# ruff: noqa: I001
"""Accounts, imports, transactions, categories, tags and keyword rules.

Revision ID: 0001_core
Revises: None
Create Date: 2026-02-17
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("bank", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False, server_default=sa.text("'checking'")),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'EUR'")),
        *_timestamps(),
        sa.CheckConstraint(
            "type in ('checking','savings','brokerage','crypto')", name="ck_accounts_type"
        ),
    )

    op.create_table(
        "imports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "account_id",
            sa.String(36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("bank", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("rows_total", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("rows_imported", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("rows_skipped", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("rows_errored", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("error_details", sa.JSON(), nullable=False),
        sa.Column("row_details", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status in ('pending','processing','completed','failed')", name="ck_imports_status"
        ),
    )

    for table in ("categories", "tags"):
        op.create_table(
            table,
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("name", sa.String(), nullable=False, unique=True),
            sa.Column("color", sa.String(7), nullable=True),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
        )

    for table, target_column, target_table in (
        ("categorization_rules", "category_id", "categories"),
        ("tagging_rules", "tag_id", "tags"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.String(36), primary_key=True),
            sa.Column("keyword", sa.String(), nullable=False),
            sa.Column(
                target_column,
                sa.String(36),
                sa.ForeignKey(f"{target_table}.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("priority", sa.Integer(), nullable=False, server_default=sa.text("0")),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
        )

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "account_id",
            sa.String(36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "import_id",
            sa.String(36),
            sa.ForeignKey("imports.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("label", sa.Text(), nullable=False),
        sa.Column("original_label", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default=sa.text("'EUR'")),
        sa.Column("bank_reference", sa.String(), nullable=True),
        sa.Column("source", sa.String(), nullable=False),
        sa.Column(
            "category_id",
            sa.String(36),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint("source in ('import','manual')", name="ck_transactions_source"),
    )
    op.create_index(
        "uq_transactions_account_date_amount_label",
        "transactions",
        ["account_id", "date", "amount", "original_label"],
        unique=True,
    )

    op.create_table(
        "transaction_tags",
        sa.Column(
            "transaction_id",
            sa.String(36),
            sa.ForeignKey("transactions.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.String(36),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )


def downgrade() -> None:
    op.drop_table("transaction_tags")
    op.drop_index("uq_transactions_account_date_amount_label", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("tagging_rules")
    op.drop_table("categorization_rules")
    op.drop_table("tags")
    op.drop_table("categories")
    op.drop_table("imports")
    op.drop_table("accounts")
