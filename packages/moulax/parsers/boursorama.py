"""Boursorama / BoursoBank CSV exports.

Semicolon separated, one signed ``amount`` column with a decimal comma and
ISO dates. Header (recent exports)::

    dateOp;dateVal;label;category;categoryParent;supplierFound;amount;
    comment;accountNum;accountLabel;accountbalance

Only ``dateOp``, ``dateVal``, ``label`` and ``amount`` are required. The
account is always held in euros.
"""

from __future__ import annotations

from typing import ClassVar

from ..models import ParsedRow
from .base import BankParser, Record, parse_amount, parse_iso_date, require
from .labels import clean_card_label


class BoursoramaParser(BankParser):
    bank: ClassVar[str] = "boursorama"
    required_headers: ClassVar[tuple[str, ...]] = ("dateOp", "dateVal", "label", "amount")
    delimiter: ClassVar[str] = ";"

    currency: ClassVar[str] = "EUR"

    def parse_record(self, record: Record) -> list[ParsedRow]:
        op_date = parse_iso_date(record.get("dateOp"))
        amount = parse_amount(record.get("amount"))
        original_label = require(record.get("label"), "missing label")
        return [
            ParsedRow(
                date=op_date,
                amount=amount,
                currency=self.currency,
                label=self.clean_label(original_label),
                original_label=original_label,
            )
        ]

    def clean_label(self, label: str) -> str:
        return clean_card_label(label)


__all__ = ["BoursoramaParser"]
