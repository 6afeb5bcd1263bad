"""Statement import pipeline: detect → parse → reconcile → match rules → persist.

:func:`process_import` records every attempt as an ``imports`` row so the
outcome (counts, per-row details, parse errors) can be shown back to the
user. Malformed statements never raise; they end as a ``failed`` import whose
``error_details`` start with a row-0 summary entry followed by the row errors
reported by the parser.
"""

from __future__ import annotations

from db.models.finance import Account, Import
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import ParseError
from .parsers import UNKNOWN_FORMAT_MESSAGE, UnknownFormatError, detect_parser, get_parser
from .persistence import (
    add_tags,
    apply_decisions,
    list_account_transaction_keys,
    list_keyword_rules,
    untagged_transactions,
)
from .reconcile import reconcile, summarize
from .rules import match_all

logger = get_logger("moulax.imports")

PARSE_FAILED_MESSAGE = "Statement parsing failed"


def create_import(session: Session, *, account_id: str, filename: str) -> Import:
    if session.get(Account, account_id) is None:
        raise LookupError(f"unknown account: {account_id}")
    record = Import(account_id=account_id, filename=filename, status="pending")
    session.add(record)
    session.flush()
    return record


def process_import(
    session: Session,
    *,
    account_id: str,
    content: bytes,
    filename: str = "statement",
    bank: str | None = None,
) -> Import:
    """Import one statement file into ``account_id`` and return the import record.

    ``bank`` skips detection; an unknown code raises
    :class:`moulax.parsers.UnknownBankError`. The session is flushed but not
    committed.
    """

    record = create_import(session, account_id=account_id, filename=filename)
    record.status = "processing"
    session.flush()

    try:
        parser = get_parser(bank) if bank else detect_parser(content)
    except UnknownFormatError:
        logger.info("import %s: no parser matched %s", record.id, filename)
        return _fail(session, record, UNKNOWN_FORMAT_MESSAGE)
    record.bank = parser.bank

    result = parser.parse(content)
    if not result.ok:
        logger.info("import %s: %s rejected with %d errors", record.id, filename, len(result.errors))
        return _fail(session, record, PARSE_FAILED_MESSAGE, result.errors)

    decisions = reconcile(result.rows, list_account_transaction_keys(session, account_id))
    record.row_details = apply_decisions(
        session,
        account_id=account_id,
        import_id=record.id,
        decisions=decisions,
        category_rules=list_keyword_rules(session, "category"),
        tag_rules=list_keyword_rules(session, "tag"),
    )

    summary = summarize(decisions)
    record.status = "completed"
    record.rows_total = summary.rows_total
    record.rows_imported = summary.rows_imported
    record.rows_skipped = summary.rows_skipped
    record.rows_errored = summary.rows_errored
    record.error_details = summary.error_details
    session.flush()
    logger.info(
        "import %s: %s %d rows (%d imported, %d skipped)",
        record.id,
        parser.bank,
        summary.rows_total,
        summary.rows_imported,
        summary.rows_skipped,
    )
    return record


def _fail(
    session: Session, record: Import, message: str, errors: tuple[ParseError, ...] = ()
) -> Import:
    record.status = "failed"
    record.rows_total = 0
    record.rows_imported = 0
    record.rows_skipped = 0
    record.rows_errored = 0
    record.error_details = [{"row": 0, "message": message}] + [
        {"row": e.row, "message": e.message} for e in errors
    ]
    record.row_details = []
    session.flush()
    return record


def apply_rules_to_untagged(session: Session) -> int:
    """Run the tagging rules over transactions without any tag.

    Returns how many transactions received at least one tag.
    """

    rules = list_keyword_rules(session, "tag")
    if not rules:
        return 0
    count = 0
    for tx in untagged_transactions(session):
        tag_ids = match_all(tx.label, rules)
        if tag_ids:
            add_tags(session, tx.id, tag_ids)
            count += 1
    session.flush()
    logger.info("tagged %d previously untagged transactions", count)
    return count


__all__ = [
    "PARSE_FAILED_MESSAGE",
    "UNKNOWN_FORMAT_MESSAGE",
    "apply_rules_to_untagged",
    "create_import",
    "process_import",
]
