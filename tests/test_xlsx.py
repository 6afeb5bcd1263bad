from __future__ import annotations

import io
import zipfile
from datetime import date, datetime, time

import pytest

from moulax.xlsx import SpreadsheetError, cell_text, is_spreadsheet, read_rows
from tests.helpers.xlsx import (
    build_raw_xlsx,
    build_xlsx,
    corrupt_member,
    inline_row,
    rewrite_directory_entry,
)

SHEET = "xl/worksheets/sheet1.xml"


def _ledger(n: int = 40) -> bytes:
    rows = [["Description", "Amount"]]
    rows += [[f"Card payment {i:03d} at merchant {i * 7:04d}", -1.25 * i] for i in range(n)]
    return build_xlsx(rows)


def test_is_spreadsheet_checks_zip_magic():
    assert is_spreadsheet(build_xlsx([["a"]]))
    assert not is_spreadsheet(b"Type,Product\n")
    assert not is_spreadsheet("PK\x03\x04 but text")
    assert not is_spreadsheet(b"")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        ("Uber", "Uber"),
        (3, "3"),
        (2.0, "2"),
        (-12.5, "-12.5"),
        (1e-05, "0.00001"),
        (1234567.89, "1234567.89"),
        (True, "TRUE"),
        (datetime(2025, 2, 10, 14, 30), "2025-02-10 14:30:00"),
        (date(2025, 2, 10), "2025-02-10"),
        (time(9, 5), "09:05:00"),
    ],
)
def test_cell_text(value, expected):
    assert cell_text(value) == expected


def test_read_rows_resolves_shared_strings_and_numbers():
    content = build_xlsx([["Description", "Amount"], ["Uber", -12.5], ["Café", 3]])
    assert read_rows(content) == [["Description", "Amount"], ["Uber", "-12.5"], ["Café", "3"]]


def test_read_rows_renders_date_cells_as_iso_text():
    content = build_xlsx([["Completed Date"], [datetime(2025, 2, 10, 14, 30)]])
    assert read_rows(content) == [["Completed Date"], ["2025-02-10 14:30:00"]]


def test_read_rows_inline_strings_and_sparse_cells_are_padded():
    sheet = inline_row(1, {"A1": "a", "C1": "c"}) + inline_row(2, {"B2": "b"})
    assert read_rows(build_raw_xlsx(sheet)) == [["a", "", "c"], ["", "b"]]


def test_read_rows_keeps_row_positions_across_gaps():
    sheet = inline_row(1, {"A1": "a"}) + inline_row(3, {"A3": "c"})
    assert read_rows(build_raw_xlsx(sheet)) == [["a"], [], ["c"]]


def test_read_rows_uses_position_when_reference_is_missing():
    sheet = '<row><c t="inlineStr"><is><t>x</t></is></c><c><v>42</v></c></row>'
    assert read_rows(build_raw_xlsx(sheet)) == [["x", "42"]]


def test_read_rows_unescapes_entities_in_shared_strings():
    sheet = '<row r="1"><c r="A1" t="s"><v>0</v></c><c r="B1" t="s"><v>1</v></c></row>'
    content = build_raw_xlsx(sheet, shared_strings=["Fish &amp; Chips", "&#233;t&#xE9;"])
    assert read_rows(content) == [["Fish & Chips", "été"]]


def test_read_rows_without_shared_strings_table():
    sheet = '<row r="1"><c r="A1"><v>7</v></c><c r="B1" t="inlineStr"><is><t>x</t></is></c></row>'
    assert read_rows(build_raw_xlsx(sheet)) == [["7", "x"]]


def test_read_rows_shared_string_cell_without_table_is_unreadable():
    sheet = '<row r="1"><c r="A1" t="s"><v>0</v></c></row>'
    with pytest.raises(SpreadsheetError):
        read_rows(build_raw_xlsx(sheet))


def test_read_rows_unicode_digit_string_index_is_unreadable():
    sheet = '<row r="1"><c r="A1" t="s"><v>²</v></c></row>'
    with pytest.raises(SpreadsheetError):
        read_rows(build_raw_xlsx(sheet, shared_strings=["a"]))


def test_read_rows_empty_sheet_is_not_an_error():
    assert read_rows(build_raw_xlsx("")) == []


def test_read_rows_reads_first_sheet_in_workbook_order():
    content = build_raw_xlsx(inline_row(1, {"A1": "first"}), inline_row(1, {"A1": "second"}))
    assert read_rows(content) == [["first"]]


def test_read_rows_rejects_workbook_without_sheets():
    with pytest.raises(SpreadsheetError):
        read_rows(build_raw_xlsx())


def test_read_rows_rejects_non_zip_payload():
    with pytest.raises(SpreadsheetError):
        read_rows(b"PK\x03\x04 definitely not a zip archive")


def test_read_rows_rejects_archive_without_workbook():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("docProps/app.xml", "<Properties/>")
    with pytest.raises(SpreadsheetError):
        read_rows(buffer.getvalue())


def test_read_rows_rejects_malformed_worksheet_xml():
    with pytest.raises(SpreadsheetError):
        read_rows(build_raw_xlsx("<row><c"))


def test_read_rows_rejects_corrupt_deflate_stream():
    content = corrupt_member(_ledger(), SHEET)
    assert is_spreadsheet(content)
    with pytest.raises(SpreadsheetError):
        read_rows(content)


def test_read_rows_rejects_corrupt_workbook_part():
    content = corrupt_member(build_raw_xlsx(inline_row(1, {"A1": "a"})), "xl/workbook.xml", 4, 40)
    with pytest.raises(SpreadsheetError):
        read_rows(content)


def test_read_rows_rejects_encrypted_member():
    content = rewrite_directory_entry(_ledger(), "[Content_Types].xml", flag_bits=0x1)
    with pytest.raises(SpreadsheetError):
        read_rows(content)


def test_read_rows_rejects_unsupported_compression():
    content = rewrite_directory_entry(_ledger(), SHEET, method=99)
    with pytest.raises(SpreadsheetError):
        read_rows(content)
