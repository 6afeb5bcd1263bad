"""Shared parsing pipeline for bank statement exports.

Every bank parser follows the same shape:

1. decode the bytes (:func:`moulax.encoding.normalize`) or, for banks that
   export workbooks, read the first worksheet (:mod:`moulax.xlsx`);
2. split into lines on ``\\n``/``\\r\\n`` and fields on the bank delimiter;
3. treat the first line as the header and build a :class:`ColumnMap`;
4. fail the whole file with a single row-0 error when required headers are
   missing;
5. run :meth:`BankParser.parse_record` on every non-blank data line.

The outcome is all-or-nothing per file: one bad row means the caller gets
every row error and no parsed rows. Malformed input never raises out of
:meth:`BankParser.parse`; it is reported through :class:`ParseResult`.
"""

from __future__ import annotations

import csv
import re
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import ClassVar

from ..encoding import normalize, split_lines
from ..logging_setup import get_logger
from ..models import ParsedRow, ParseError, ParseResult
from ..xlsx import SpreadsheetError, is_spreadsheet, read_rows

logger = get_logger("moulax.parsers")

# Whitespace (non-breaking spaces included) and apostrophes are
# thousands separators in the locales banks export with.
_GROUPING_RE = re.compile(r"[\s']")
_PLAIN_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


class RowError(ValueError):
    """Raised inside :meth:`BankParser.parse_record` to reject one data row."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Header map
# ---------------------------------------------------------------------------


class ColumnMap:
    """Header name → column index, resolved once per file.

    A header that appears more than once still counts as present for
    validation, but reading it yields no data: :meth:`index_of` returns
    ``None`` and the row reports the field as missing.
    """

    __slots__ = ("_first", "_duplicated")

    def __init__(self, headers: Iterable[str]) -> None:
        names = list(headers)
        counts = Counter(names)
        self._first: dict[str, int] = {}
        for idx, name in enumerate(names):
            self._first.setdefault(name, idx)
        self._duplicated = {name for name, n in counts.items() if n > 1}

    def __contains__(self, name: object) -> bool:
        return name in self._first

    def index_of(self, name: str) -> int | None:
        if name in self._duplicated:
            return None
        return self._first.get(name)

    def missing(self, required: Sequence[str]) -> list[str]:
        return [name for name in required if name not in self._first]


@dataclass(frozen=True, slots=True)
class Record:
    """One data line: its 1-based index, its fields and the file's header map."""

    index: int
    fields: Sequence[str]
    columns: ColumnMap

    def get(self, name: str) -> str | None:
        idx = self.columns.index_of(name)
        if idx is None or idx >= len(self.fields):
            return None
        return self.fields[idx]

    def is_blank(self) -> bool:
        return all(not f.strip() for f in self.fields)


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def require(value: str | None, missing_message: str) -> str:
    """Return the trimmed ``value`` or reject the row with ``missing_message``."""

    if value is None or not value.strip():
        raise RowError(missing_message)
    return value.strip()


def to_decimal(raw: str) -> Decimal | None:
    """Parse a localized amount (``"-1 234,56"``, ``"1,234.56"``) exactly.

    When both ``,`` and ``.`` appear, the right-most one is the decimal
    separator. A single ``,`` is a decimal comma. Returns ``None`` for
    anything that is not a plain decimal number after normalization.
    """

    s = _GROUPING_RE.sub("", raw)
    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif s.count(",") == 1:
        s = s.replace(",", ".")
    elif s.count(",") > 1:
        s = s.replace(",", "")
    if not _PLAIN_DECIMAL_RE.fullmatch(s):
        return None
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def parse_amount(value: str | None, *, field: str = "amount") -> Decimal:
    raw = require(value, f"missing {field}")
    amount = to_decimal(raw)
    if amount is None:
        raise RowError(f"invalid {field}: {value}")
    return amount


def parse_iso_date(value: str | None) -> date:
    raw = require(value, "missing date")
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise RowError(f"invalid date: {value}") from exc


def split_fields(line: str, delimiter: str) -> list[str]:
    """Split one line on ``delimiter`` honouring double-quoted fields."""

    return next(csv.reader([line], delimiter=delimiter), [])


# ---------------------------------------------------------------------------
# Parser base class
# ---------------------------------------------------------------------------


class BankParser(ABC):
    """Stateless strategy for one bank's export format.

    Subclasses declare ``bank``, ``required_headers`` and ``delimiter`` and
    implement :meth:`parse_record`. Detection and parsing share
    :meth:`header_key`, so a file that is detected always passes header
    validation.
    """

    bank: ClassVar[str]
    required_headers: ClassVar[tuple[str, ...]]
    delimiter: ClassVar[str] = ";"
    reads_spreadsheets: ClassVar[bool] = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} bank={self.bank!r}>"

    # -- hooks -----------------------------------------------------------

    def header_key(self, header: str) -> str:
        """Map a raw header cell to the name used in ``required_headers``."""

        return header.strip()

    def clean_label(self, label: str) -> str:
        """Return the human-readable form of a raw description."""

        return label.strip()

    @abstractmethod
    def parse_record(self, record: Record) -> list[ParsedRow]:
        """Turn one non-blank data line into zero or more rows.

        Raise :class:`RowError` to reject the line. Returning an empty list
        skips it silently.
        """

    # -- public contract -------------------------------------------------

    def detect(self, content: bytes | str) -> bool:
        """Return True when the header line carries every required column."""

        try:
            table = self._table(content)
        except SpreadsheetError:
            return False
        if not table:
            return False
        columns = ColumnMap(self.header_key(h) for h in table[0])
        return not columns.missing(self.required_headers)

    def parse(self, content: bytes | str) -> ParseResult:
        """Parse a whole export into rows, or into the list of row errors."""

        try:
            table = self._table(content)
        except SpreadsheetError as exc:
            logger.debug("%s: unreadable spreadsheet: %s", self.bank, exc)
            return ParseResult.file_error("unreadable spreadsheet")
        if table is None:
            return ParseResult.file_error("unsupported file format")
        if not table:
            return ParseResult.file_error("empty file")

        header, *data = table
        columns = ColumnMap(self.header_key(h) for h in header)
        missing = columns.missing(self.required_headers)
        if missing:
            return ParseResult.file_error(f"missing required columns: {', '.join(missing)}")

        rows: list[ParsedRow] = []
        errors: list[ParseError] = []
        for index, fields in enumerate(data, start=1):
            record = Record(index=index, fields=fields, columns=columns)
            if record.is_blank():
                continue
            try:
                rows.extend(self.parse_record(record))
            except RowError as exc:
                errors.append(ParseError(row=index, message=exc.message))

        logger.debug(
            "%s: %d data lines, %d rows, %d errors", self.bank, len(data), len(rows), len(errors)
        )
        if errors:
            return ParseResult.failure(errors)
        return ParseResult.success(rows)

    # -- internals -------------------------------------------------------

    def _table(self, content: bytes | str) -> list[list[str]] | None:
        """Return header + data lines as field lists.

        ``None`` means the content is a workbook and this bank only exports
        text. Raises :class:`SpreadsheetError` for unreadable workbooks.
        """

        if is_spreadsheet(content):
            if not self.reads_spreadsheets:
                return None
            return read_rows(bytes(content))
        return [split_fields(line, self.delimiter) for line in split_lines(normalize(content))]


__all__ = [
    "BankParser",
    "ColumnMap",
    "Record",
    "RowError",
    "parse_amount",
    "parse_iso_date",
    "require",
    "split_fields",
    "to_decimal",
]
