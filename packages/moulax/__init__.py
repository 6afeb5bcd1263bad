"""Public interface for the ``moulax`` package.

Bank statement ingestion: per-bank parsers behind a detection registry, the
deduplication policy applied on import and the keyword rule matcher. This
module only re-exports symbols. Storage-backed entry points live in
:mod:`moulax.imports` and :mod:`moulax.persistence`, which need ``libs/db``.
"""

from .encoding import normalize, repair_text
from .models import (
    ImportSummary,
    KeywordRule,
    ParsedRow,
    ParseError,
    ParseResult,
    RowDecision,
    TransactionKey,
)
from .parsers import (
    PARSERS,
    BankParser,
    UnknownBankError,
    UnknownFormatError,
    detect_parser,
    get_parser,
    parse_statement,
)
from .reconcile import assign_occurrences, reconcile, summarize
from .rules import match_all, match_one
from .xlsx import SpreadsheetError, is_spreadsheet, read_rows

__all__ = [
    # Parsing
    "PARSERS",
    "BankParser",
    "UnknownBankError",
    "UnknownFormatError",
    "detect_parser",
    "get_parser",
    "parse_statement",
    "normalize",
    "repair_text",
    "SpreadsheetError",
    "is_spreadsheet",
    "read_rows",
    # Reconciliation and rules
    "assign_occurrences",
    "reconcile",
    "summarize",
    "match_all",
    "match_one",
    # Models / types
    "ImportSummary",
    "KeywordRule",
    "ParsedRow",
    "ParseError",
    "ParseResult",
    "RowDecision",
    "TransactionKey",
]
