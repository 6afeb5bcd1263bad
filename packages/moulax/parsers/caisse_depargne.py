"""Caisse d'Épargne CSV exports.

Semicolon separated with ``DD/MM/YYYY`` dates and the amount split across a
``Débit`` and a ``Crédit`` column. The column that holds a value decides the
sign, whatever sign the text itself carries. ``Numéro d'opération`` is kept
verbatim as the row's bank reference.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import ClassVar

from ..encoding import repair_text
from ..models import ParsedRow
from .base import BankParser, Record, RowError, parse_amount, require
from .labels import strip_markers

_DMY_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")

DATE = "Date"
REFERENCE = "Numéro d'opération"
LABEL = "Libellé"
DEBIT = "Débit"
CREDIT = "Crédit"


def parse_dmy_date(value: str | None) -> date:
    raw = require(value, "missing date")
    match = _DMY_RE.match(raw)
    if match is None:
        raise RowError(f"invalid date: {value}")
    day, month, year = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise RowError(f"invalid date: {value}") from exc


class CaisseDepargneParser(BankParser):
    bank: ClassVar[str] = "caisse_depargne"
    required_headers: ClassVar[tuple[str, ...]] = (DATE, REFERENCE, LABEL, DEBIT, CREDIT)
    delimiter: ClassVar[str] = ";"

    currency: ClassVar[str] = "EUR"

    def header_key(self, header: str) -> str:
        return repair_text(header).strip()

    def parse_record(self, record: Record) -> list[ParsedRow]:
        op_date = parse_dmy_date(record.get(DATE))
        amount = self._signed_amount(record)
        original_label = require(record.get(LABEL), "missing label")
        reference = (record.get(REFERENCE) or "").strip()
        return [
            ParsedRow(
                date=op_date,
                amount=amount,
                currency=self.currency,
                label=self.clean_label(original_label),
                original_label=original_label,
                bank_reference=reference or None,
            )
        ]

    @staticmethod
    def _signed_amount(record: Record) -> Decimal:
        debit = (record.get(DEBIT) or "").strip()
        credit = (record.get(CREDIT) or "").strip()
        if debit:
            return -abs(parse_amount(debit))
        if credit:
            return abs(parse_amount(credit))
        raise RowError("missing amount")

    def clean_label(self, label: str) -> str:
        return strip_markers(label)


__all__ = ["CaisseDepargneParser", "parse_dmy_date"]
