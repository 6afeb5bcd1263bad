"""Revolut account statements, CSV or ``.xlsx``.

English and French (fr-fr) exports carry the same ten columns under
different names; headers are folded to a token (``"Date de début"`` →
``datededebut``) and mapped back to the English names. Workbooks written by
Excel can carry ``_x000D_`` style escapes and double-encoded UTF-8 in their
text, which :func:`moulax.encoding.repair_text` undoes.

Only completed operations are imported. Pending, reverted and declined rows
are skipped without an error. A non-zero fee becomes a second, negative row
next to the operation it belongs to.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from decimal import Decimal
from typing import ClassVar

from ..encoding import fold, repair_text
from ..models import ParsedRow
from .base import BankParser, Record, RowError, parse_amount, require, to_decimal

TYPE = "Type"
PRODUCT = "Product"
STARTED_DATE = "Started Date"
COMPLETED_DATE = "Completed Date"
DESCRIPTION = "Description"
AMOUNT = "Amount"
FEE = "Fee"
CURRENCY = "Currency"
STATE = "State"
BALANCE = "Balance"

CANONICAL_HEADERS = (
    TYPE,
    PRODUCT,
    STARTED_DATE,
    COMPLETED_DATE,
    DESCRIPTION,
    AMOUNT,
    FEE,
    CURRENCY,
    STATE,
    BALANCE,
)

_HEADER_TOKENS: dict[str, str] = {
    "type": TYPE,
    "product": PRODUCT,
    "produit": PRODUCT,
    "starteddate": STARTED_DATE,
    "datededebut": STARTED_DATE,
    "completeddate": COMPLETED_DATE,
    "datedefin": COMPLETED_DATE,
    "description": DESCRIPTION,
    "amount": AMOUNT,
    "montant": AMOUNT,
    "fee": FEE,
    "frais": FEE,
    "currency": CURRENCY,
    "devise": CURRENCY,
    "state": STATE,
    "etat": STATE,
    # "État" read through a lossy decode loses its first letter.
    "tat": STATE,
    "balance": BALANCE,
    "solde": BALANCE,
}

# "termin" is "TERMINÉ" after a lossy decode dropped the accent.
COMPLETED_STATES = frozenset({"completed", "termine", "termin"})

EXCEL_EPOCH = date(1899, 12, 30)
_EXCEL_SERIAL_RE = re.compile(r"[+-]?\d+(?:\.\d+)?")

FEE_PREFIX = "Fee: "


def is_completed(state: str) -> bool:
    return fold(repair_text(state).strip()) in COMPLETED_STATES


def parse_completed_date(value: str | None) -> date:
    """Parse ``YYYY-MM-DD[ HH:MM:SS]`` or an Excel serial day number."""

    if value is None or not value.strip():
        raise RowError("missing date")
    text = repair_text(value).strip()
    try:
        return date.fromisoformat(text.split(" ", 1)[0])
    except ValueError:
        pass
    if _EXCEL_SERIAL_RE.fullmatch(text):
        try:
            return EXCEL_EPOCH + timedelta(days=int(float(text)))
        except OverflowError:
            pass
    raise RowError(f"invalid date: {value}")


def parse_fee(value: str | None) -> Decimal:
    if value is None or not value.strip():
        return Decimal(0)
    fee = to_decimal(value.strip())
    if fee is None:
        raise RowError(f"invalid fee: {value}")
    return fee


class RevolutParser(BankParser):
    bank: ClassVar[str] = "revolut"
    required_headers: ClassVar[tuple[str, ...]] = CANONICAL_HEADERS
    delimiter: ClassVar[str] = ","
    reads_spreadsheets: ClassVar[bool] = True

    def header_key(self, header: str) -> str:
        trimmed = repair_text(header).strip()
        return _HEADER_TOKENS.get(fold(trimmed), trimmed)

    def parse_record(self, record: Record) -> list[ParsedRow]:
        state = record.get(STATE)
        if state is None or not state.strip() or not is_completed(state):
            return []

        op_date = parse_completed_date(record.get(COMPLETED_DATE))
        amount = parse_amount(record.get(AMOUNT))
        label = self.clean_label(require(record.get(DESCRIPTION), "missing description"))
        currency = require(record.get(CURRENCY), "missing currency")
        fee = parse_fee(record.get(FEE))

        rows = [
            ParsedRow(
                date=op_date,
                amount=amount,
                currency=currency,
                label=label,
                original_label=label,
            )
        ]
        if fee != 0:
            fee_label = f"{FEE_PREFIX}{label}"
            rows.append(
                ParsedRow(
                    date=op_date,
                    amount=-abs(fee),
                    currency=currency,
                    label=fee_label,
                    original_label=fee_label,
                )
            )
        return rows


__all__ = [
    "CANONICAL_HEADERS",
    "COMPLETED_STATES",
    "RevolutParser",
    "is_completed",
    "parse_completed_date",
    "parse_fee",
]
