from __future__ import annotations

from datetime import date
from decimal import Decimal

from moulax.models import ParseError
from moulax.parsers import BoursoramaParser
from tests.helpers.xlsx import build_xlsx

parser = BoursoramaParser()

HEADER = "dateOp;dateVal;label;amount"


def _errors(content: str | bytes) -> list[tuple[int, str]]:
    result = parser.parse(content)
    assert result.rows == ()
    return [(e.row, e.message) for e in result.errors]


def test_bank_code():
    assert parser.bank == "boursorama"


def test_detects_full_and_minimal_headers(fixtures_dir):
    assert parser.detect((fixtures_dir / "boursorama_valid.csv").read_bytes())
    assert parser.detect(f"{HEADER}\n")
    assert not parser.detect("dateOp;label;amount\n")
    assert not parser.detect(b"")


def test_parses_single_card_payment():
    result = parser.parse(f"{HEADER}\n2026-02-10;2026-02-10;CARTE 10/02 CARREFOUR;-45,32\n")
    assert result.ok
    [row] = result.rows
    assert row.date == date(2026, 2, 10)
    assert row.amount == Decimal("-45.32")
    assert row.label == "CARREFOUR"
    assert row.original_label == "CARTE 10/02 CARREFOUR"
    assert row.currency == "EUR"
    assert row.bank_reference is None


def test_parses_fixture_in_row_order(fixtures_dir):
    result = parser.parse((fixtures_dir / "boursorama_valid.csv").read_bytes())
    assert result.ok
    assert [(r.label, r.amount) for r in result.rows] == [
        ("CARREFOUR", Decimal("-45.32")),
        ("EMPLOYEUR", Decimal("2500.00")),
        ("Netflix", Decimal("-13.49")),
        ("PRLV SEPA FREE MOBILE", Decimal("-19.99")),
    ]
    assert result.rows[2].original_label == "Netflix | CARTE 12/02 NETFLIX.COM CB*1234"


def test_amount_with_thousands_separator():
    result = parser.parse(f"{HEADER}\n2026-02-01;2026-02-01;VIR SEPA LOYER;-1 234,56\n")
    assert result.rows[0].amount == Decimal("-1234.56")


def test_bom_and_crlf_do_not_change_the_result(fixtures_dir):
    plain = (fixtures_dir / "boursorama_valid.csv").read_bytes()
    variant = b"\xef\xbb\xbf" + plain.replace(b"\n", b"\r\n")
    assert parser.parse(variant) == parser.parse(plain)


def test_latin1_export_is_decoded():
    content = f"{HEADER};category\n2026-02-10;2026-02-10;CARTE 10/02 CAFÉ;-3,50;Café\n"
    result = parser.parse(content.encode("latin-1"))
    assert result.rows[0].label == "CAFÉ"


def test_quoted_fields_keep_their_delimiters():
    result = parser.parse(f'{HEADER}\n2026-02-10;2026-02-10;"SNCF; BILLET";-30,00\n')
    assert result.rows[0].label == "SNCF; BILLET"


def test_empty_file():
    assert _errors("") == [(0, "empty file")]
    assert _errors(b"\xef\xbb\xbf") == [(0, "empty file")]


def test_header_only_file_has_no_rows_and_no_errors():
    result = parser.parse(f"{HEADER}\n")
    assert result.ok
    assert result.rows == ()


def test_missing_columns_listed_in_required_order():
    assert _errors("label;dateOp\nx;2026-01-01\n") == [
        (0, "missing required columns: dateVal, amount")
    ]


def test_row_errors_are_all_reported_and_suppress_good_rows():
    content = "\n".join(
        [
            HEADER,
            "2026-02-10;2026-02-10;OK;-1,00",
            ";2026-02-10;NO DATE;-1,00",
            "10/02/2026;2026-02-10;BAD DATE;-1,00",
            "2026-02-10;2026-02-10;NO AMOUNT;",
            "2026-02-10;2026-02-10;BAD AMOUNT;abc",
            "2026-02-10;2026-02-10;;-1,00",
        ]
    )
    assert _errors(content) == [
        (2, "missing date"),
        (3, "invalid date: 10/02/2026"),
        (4, "missing amount"),
        (5, "invalid amount: abc"),
        (6, "missing label"),
    ]


def test_first_failing_check_wins_per_row():
    assert _errors(f"{HEADER}\n;2026-02-10;;\n") == [(1, "missing date")]
    assert _errors(f"{HEADER}\n2026-02-10;2026-02-10;;\n") == [(1, "missing amount")]


def test_blank_lines_are_skipped_but_counted():
    content = f"{HEADER}\n2026-02-10;2026-02-10;A;-1,00\n ; ; ; \n2026-02-10;2026-02-10;B;\n"
    assert _errors(content) == [(3, "missing amount")]


def test_short_row_reports_missing_fields():
    assert _errors(f"{HEADER}\n2026-02-10;2026-02-10\n") == [(1, "missing amount")]


def test_duplicate_header_reads_as_missing():
    content = "dateOp;dateVal;label;amount;label\n2026-02-10;2026-02-10;A;-1,00;B\n"
    assert parser.detect(content)
    assert _errors(content) == [(1, "missing label")]


def test_spreadsheet_input_is_rejected():
    content = build_xlsx([["dateOp", "dateVal", "label", "amount"]])
    assert not parser.detect(content)
    assert parser.parse(content).errors == (ParseError(row=0, message="unsupported file format"),)
