"""Data models shared by the parsers, the reconciler and the rule matcher.

Parsed rows and parse errors are transient values produced by a single parse
call. Keyword rules are owned by the storage layer and are only read here.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Literal, NamedTuple, TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Parser output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedRow:
    """A canonical transaction extracted from one line of a bank statement.

    ``amount`` carries the sign (negative = debit). ``label`` is the cleaned,
    human-readable text; ``original_label`` is the raw description as exported
    and is the one used for deduplication.
    """

    date: date
    amount: Decimal
    currency: str
    label: str
    original_label: str
    bank_reference: str | None = None


@dataclass(frozen=True, slots=True)
class ParseError:
    """A problem attributed to a 1-based data row; row ``0`` is file-level."""

    row: int
    message: str


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Either the parsed rows of a file or the errors found in it, never both."""

    rows: tuple[ParsedRow, ...] = ()
    errors: tuple[ParseError, ...] = ()

    def __post_init__(self) -> None:
        if self.rows and self.errors:
            raise ValueError("ParseResult cannot carry both rows and errors")

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def success(cls, rows: Sequence[ParsedRow]) -> ParseResult:
        return cls(rows=tuple(rows))

    @classmethod
    def failure(cls, errors: Sequence[ParseError]) -> ParseResult:
        return cls(errors=tuple(errors))

    @classmethod
    def file_error(cls, message: str) -> ParseResult:
        return cls(errors=(ParseError(row=0, message=message),))


# ---------------------------------------------------------------------------
# Keyword rules
# ---------------------------------------------------------------------------


class KeywordRule(BaseModel):
    """A keyword → target (tag or category) association with a priority.

    Rules are evaluated from the highest ``priority`` down. Equal priorities
    are ordered by :func:`moulax.rules.rule_sort_key`.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    keyword: str
    target_id: str
    priority: int = 0
    id: str | None = None

    @field_validator("keyword")
    @classmethod
    def _keyword_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("keyword must be non-empty")
        return v


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


class TransactionKey(NamedTuple):
    """Natural key of an imported transaction within one account."""

    date: date
    amount: Decimal
    original_label: str
    occurrence: int


RowStatus: TypeAlias = Literal["added", "updated", "skipped"]
StoredSource: TypeAlias = Literal["import", "manual"]


@dataclass(frozen=True, slots=True)
class RowDecision:
    """What the reconciler decided for one parsed row (``row_index`` is 1-based)."""

    row_index: int
    row: ParsedRow
    key: TransactionKey
    status: RowStatus


@dataclass(slots=True)
class ImportSummary:
    rows_total: int = 0
    rows_imported: int = 0
    rows_skipped: int = 0
    rows_errored: int = 0
    error_details: list[dict[str, object]] = field(default_factory=list)


__all__ = [
    "ImportSummary",
    "KeywordRule",
    "ParseError",
    "ParseResult",
    "ParsedRow",
    "RowDecision",
    "RowStatus",
    "StoredSource",
    "TransactionKey",
]
