from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


def _id_column() -> Mapped[str]:
    return mapped_column(String(36), primary_key=True, default=_uuid)


def _created_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


def _updated_at() -> Mapped[datetime]:
    return mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


# ---------------------------
# Accounts and imports
# ---------------------------


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[str] = _id_column()
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Bank code of the parser that reads this account's exports.
    bank: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'checking'"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, server_default=text("'EUR'"))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        CheckConstraint(
            "type in ('checking','savings','brokerage','crypto')", name="ck_accounts_type"
        ),
    )


class Import(Base):
    __tablename__ = "imports"

    id: Mapped[str] = _id_column()
    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    filename: Mapped[str] = mapped_column(String, nullable=False)
    bank: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'pending'"))
    rows_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rows_imported: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rows_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rows_errored: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_details: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    row_details: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        CheckConstraint(
            "status in ('pending','processing','completed','failed')", name="ck_imports_status"
        ),
    )


# ---------------------------
# Taxonomy and keyword rules
# ---------------------------


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = _id_column()
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    created_at: Mapped[datetime] = _created_at()


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[str] = _id_column()
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    created_at: Mapped[datetime] = _created_at()


class CategorizationRule(Base):
    __tablename__ = "categorization_rules"

    id: Mapped[str] = _id_column()
    keyword: Mapped[str] = mapped_column(String, nullable=False)
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = _created_at()


class TaggingRule(Base):
    __tablename__ = "tagging_rules"

    id: Mapped[str] = _id_column()
    keyword: Mapped[str] = mapped_column(String, nullable=False)
    tag_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = _created_at()


# ---------------------------
# Core: transactions
# ---------------------------


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = _id_column()
    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    import_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("imports.id", ondelete="SET NULL"), nullable=True
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    # Cleaned text shown to users and matched by keyword rules.
    label: Mapped[str] = mapped_column(Text, nullable=False)
    # Raw export text; part of the dedup key and never rewritten.
    original_label: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, server_default=text("'EUR'"))
    bank_reference: Mapped[str | None] = mapped_column(String, nullable=True)
    source: Mapped[str] = mapped_column(String, nullable=False)
    # 1-based rank among identical (date, amount, original_label) rows of the account.
    occurrence: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=text("1")
    )
    category_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        UniqueConstraint(
            "account_id",
            "date",
            "amount",
            "original_label",
            "occurrence",
            name="uq_transactions_account_date_amount_label_occ",
        ),
        CheckConstraint("source in ('import','manual')", name="ck_transactions_source"),
        CheckConstraint("occurrence >= 1", name="ck_transactions_occurrence"),
    )


class TransactionTag(Base):
    __tablename__ = "transaction_tags"

    transaction_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("transactions.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )


__all__ = [
    "Account",
    "Base",
    "CategorizationRule",
    "Category",
    "Import",
    "Tag",
    "TaggingRule",
    "Transaction",
    "TransactionTag",
]
