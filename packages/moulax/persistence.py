"""Storage adapter between the import pipeline and ``libs/db``.

Functions here read keyword rules and existing transaction keys, and write
reconciled rows with their category and tags. They take an open SQLAlchemy
session and never commit; the caller owns the transaction (see
``db.client.session_scope``).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Literal, TypeAlias

from db.models.finance import (
    CategorizationRule,
    Tag,
    TaggingRule,
    Transaction,
    TransactionTag,
)
from sqlalchemy import select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import KeywordRule, RowDecision, StoredSource, TransactionKey
from .rules import match_all, match_one, sort_rules

logger = get_logger("moulax.persistence")

RuleKind: TypeAlias = Literal["category", "tag"]

# Transaction.source values as stored → reconciler view.
IMPORT_SOURCE = "import"
MANUAL_SOURCE = "manual"


def list_keyword_rules(session: Session, kind: RuleKind) -> list[KeywordRule]:
    """Return categorization or tagging rules, highest priority first."""

    if kind == "category":
        stmt = select(
            CategorizationRule.id,
            CategorizationRule.keyword,
            CategorizationRule.category_id,
            CategorizationRule.priority,
        )
    elif kind == "tag":
        stmt = select(TaggingRule.id, TaggingRule.keyword, TaggingRule.tag_id, TaggingRule.priority)
    else:
        raise ValueError(f"unknown rule kind: {kind!r}")

    rules = [
        KeywordRule(id=rule_id, keyword=keyword, target_id=target_id, priority=priority or 0)
        for rule_id, keyword, target_id, priority in session.execute(stmt).all()
    ]
    return sort_rules(rules)


def list_account_transaction_keys(
    session: Session, account_id: str
) -> dict[TransactionKey, StoredSource]:
    stmt = select(
        Transaction.date,
        Transaction.amount,
        Transaction.original_label,
        Transaction.occurrence,
        Transaction.source,
    ).where(Transaction.account_id == account_id)
    keys: dict[TransactionKey, StoredSource] = {}
    for tx_date, amount, original_label, occurrence, source in session.execute(stmt).all():
        key = TransactionKey(tx_date, amount, original_label, occurrence)
        keys[key] = "import" if source == IMPORT_SOURCE else "manual"
    return keys


def tag_names(session: Session) -> dict[str, str]:
    return dict(session.execute(select(Tag.id, Tag.name)).tuples().all())


def _find_transaction(session: Session, account_id: str, key: TransactionKey) -> Transaction | None:
    stmt = select(Transaction).where(
        Transaction.account_id == account_id,
        Transaction.date == key.date,
        Transaction.amount == key.amount,
        Transaction.original_label == key.original_label,
        Transaction.occurrence == key.occurrence,
    )
    return session.execute(stmt).scalar_one_or_none()


def _existing_tag_ids(session: Session, transaction_id: str) -> set[str]:
    stmt = select(TransactionTag.tag_id).where(TransactionTag.transaction_id == transaction_id)
    return set(session.execute(stmt).scalars().all())


def add_tags(session: Session, transaction_id: str, tag_ids: Iterable[str]) -> set[str]:
    """Link ``tag_ids`` to a transaction, ignoring links that already exist."""

    new = set(tag_ids) - _existing_tag_ids(session, transaction_id)
    for tag_id in sorted(new):
        session.add(TransactionTag(transaction_id=transaction_id, tag_id=tag_id))
    return new


def apply_decisions(
    session: Session,
    *,
    account_id: str,
    import_id: str | None,
    decisions: Sequence[RowDecision],
    category_rules: Sequence[KeywordRule] = (),
    tag_rules: Sequence[KeywordRule] = (),
) -> list[dict[str, Any]]:
    """Write ``added`` and ``updated`` rows and return one detail dict per decision.

    ``updated`` rows keep their dedup key and any category or tags already
    set on them; the label, currency, bank reference and import link are
    refreshed and matching tags are added. ``skipped`` rows are not touched.
    """

    names = tag_names(session) if tag_rules else {}
    details: list[dict[str, Any]] = []
    for decision in decisions:
        row = decision.row
        tag_ids: set[str] = set()
        if decision.status != "skipped":
            category_id = match_one(row.label, category_rules)
            tag_ids = match_all(row.label, tag_rules)
            tx = _write_row(session, account_id, import_id, decision, category_id)
            add_tags(session, tx.id, tag_ids)

        labels = sorted(names[t] for t in tag_ids if t in names)
        details.append(
            {
                "row": decision.row_index,
                "date": row.date.isoformat(),
                "label": row.label,
                "amount": str(row.amount),
                "status": decision.status,
                "tags": ", ".join(labels) if labels else None,
            }
        )
    return details


def _write_row(
    session: Session,
    account_id: str,
    import_id: str | None,
    decision: RowDecision,
    category_id: str | None,
) -> Transaction:
    row = decision.row
    tx = None
    if decision.status == "updated":
        tx = _find_transaction(session, account_id, decision.key)
        if tx is None:
            logger.warning("row %d: stored transaction vanished, re-adding", decision.row_index)
    if tx is None:
        tx = Transaction(
            account_id=account_id,
            date=row.date,
            amount=row.amount,
            original_label=row.original_label,
            occurrence=decision.key.occurrence,
            source=IMPORT_SOURCE,
        )
        session.add(tx)
    tx.label = row.label
    tx.currency = row.currency
    tx.bank_reference = row.bank_reference
    tx.import_id = import_id
    if tx.category_id is None:
        tx.category_id = category_id
    session.flush()
    return tx


def untagged_transactions(session: Session) -> list[Transaction]:
    tagged = select(TransactionTag.transaction_id).distinct()
    stmt = select(Transaction).where(Transaction.id.not_in(tagged)).order_by(Transaction.date)
    return list(session.execute(stmt).scalars().all())


__all__ = [
    "IMPORT_SOURCE",
    "MANUAL_SOURCE",
    "add_tags",
    "apply_decisions",
    "list_account_transaction_keys",
    "list_keyword_rules",
    "tag_names",
    "untagged_transactions",
]
