"""Read the first worksheet of an ``.xlsx`` workbook as a grid of strings.

Loading is delegated to openpyxl in read-only mode; this module only turns
cell values back into the text a CSV export would carry:

* empty cells become ``""``;
* integers and floats are written without exponent or float noise
  (``-12.5``, ``3``, ``0.1``);
* date-formatted cells become ISO text (``2025-02-10 14:30:00``).

Rows keep their sheet position, so a gap in the worksheet shows up as an
empty row and data-row numbers match what the user sees in Excel.
"""

from __future__ import annotations

import zipfile
import zlib
from datetime import date, datetime, time
from decimal import Decimal
from io import BytesIO
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from .logging_setup import get_logger

ZIP_MAGIC = b"PK\x03\x04"

# Everything a damaged container can raise while openpyxl inflates and
# parses it. NotImplementedError (unsupported compression) is a RuntimeError,
# as is the error raised for encrypted members. XML parse errors from both
# ElementTree and lxml derive from SyntaxError.
_READ_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    InvalidFileException,
    EOFError,
    OSError,
    KeyError,
    IndexError,
    RuntimeError,
    SyntaxError,
    TypeError,
    ValueError,
)

logger = get_logger("moulax.xlsx")


class SpreadsheetError(ValueError):
    """The workbook container or its worksheet XML could not be read."""


def is_spreadsheet(content: bytes | str) -> bool:
    """Return True when ``content`` starts with the zip local-file magic number."""

    return isinstance(content, bytes | bytearray) and bytes(content[:4]) == ZIP_MAGIC


def read_rows(content: bytes) -> list[list[str]]:
    """Return the first worksheet (in workbook order) as a grid of strings.

    An absent shared-strings table, missing cells and empty sheets are not
    errors. Anything that stops openpyxl from inflating or parsing the
    workbook is raised as :class:`SpreadsheetError`.
    """

    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except _READ_ERRORS as exc:
        raise SpreadsheetError(f"cannot open workbook: {exc}") from exc

    try:
        if not workbook.worksheets:
            raise SpreadsheetError("workbook has no worksheet")
        sheet = workbook.worksheets[0]
        rows = [[cell_text(value) for value in row] for row in sheet.iter_rows(values_only=True)]
    except SpreadsheetError:
        raise
    except _READ_ERRORS as exc:
        raise SpreadsheetError(f"cannot read worksheet: {exc}") from exc
    finally:
        workbook.close()

    logger.debug("read %d spreadsheet rows from %r", len(rows), sheet.title)
    return rows


def cell_text(value: Any) -> str:
    """Render one openpyxl cell value the way a CSV export would spell it."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        # repr() is the shortest round-tripping form; Decimal drops the exponent.
        return format(Decimal(repr(value)), "f")
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date | time):
        return value.isoformat()
    return str(value)


__all__ = [
    "SpreadsheetError",
    "ZIP_MAGIC",
    "cell_text",
    "is_spreadsheet",
    "read_rows",
]
