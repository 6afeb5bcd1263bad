from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from moulax.parsers import CaisseDepargneParser

parser = CaisseDepargneParser()

HEADER = "Date;Numéro d'opération;Libellé;Débit;Crédit;Détail"


def _errors(content: str | bytes) -> list[tuple[int, str]]:
    result = parser.parse(content)
    assert result.rows == ()
    return [(e.row, e.message) for e in result.errors]


def test_detects_utf8_and_latin1_headers(fixtures_dir):
    fixture = (fixtures_dir / "caisse_depargne_valid.csv").read_bytes()
    assert parser.detect(fixture)
    assert parser.detect(fixture.decode("utf-8").encode("latin-1"))
    assert not parser.detect("dateOp;dateVal;label;amount\n")


def test_detects_double_encoded_headers():
    mangled = HEADER.encode("utf-8").decode("latin-1")
    assert parser.detect(mangled)


def test_credit_transfer_scenario():
    result = parser.parse(f"{HEADER}\n10/02/2026;123456;VIR SEPA EMPLOYEUR;;2500.00;\n")
    assert result.ok
    [row] = result.rows
    assert row.date == date(2026, 2, 10)
    assert row.amount == Decimal("2500.00")
    assert row.label == "EMPLOYEUR"
    assert row.original_label == "VIR SEPA EMPLOYEUR"
    assert row.bank_reference == "123456"
    assert row.currency == "EUR"


def test_parses_fixture(fixtures_dir):
    result = parser.parse((fixtures_dir / "caisse_depargne_valid.csv").read_bytes())
    assert result.ok
    assert [(r.date, r.label, r.amount, r.bank_reference) for r in result.rows] == [
        (date(2026, 2, 10), "EMPLOYEUR", Decimal("2500.00"), "123456"),
        (date(2026, 2, 11), "BOULANGERIE PAUL", Decimal("-4.20"), "123457"),
        (date(2026, 2, 12), "PRLV SEPA EDF", Decimal("-65.30"), "123458"),
        (date(2026, 2, 13), "REMISE CHEQUE", Decimal("1150.00"), "123459"),
    ]


def test_bom_and_crlf_do_not_change_the_result(fixtures_dir):
    plain = (fixtures_dir / "caisse_depargne_valid.csv").read_bytes()
    variant = b"\xef\xbb\xbf" + plain.replace(b"\n", b"\r\n")
    assert parser.parse(variant) == parser.parse(plain)


def test_latin1_export_behind_a_bom_keeps_its_accents(fixtures_dir):
    latin1 = (fixtures_dir / "caisse_depargne_valid.csv").read_text("utf-8").encode("latin-1")
    with_bom = b"\xef\xbb\xbf" + latin1
    assert parser.detect(with_bom)
    assert parser.parse(with_bom) == parser.parse(latin1)
    assert parser.parse(with_bom).ok


@pytest.mark.parametrize("debit", ["12,50", "-12,50", "+12,50", " 12,50 "])
def test_debit_is_always_negative(debit):
    result = parser.parse(f"{HEADER}\n01/03/2026;1;X;{debit};;\n")
    assert result.rows[0].amount == Decimal("-12.50")


@pytest.mark.parametrize("credit", ["12,50", "-12,50", "+12,50"])
def test_credit_is_always_positive(credit):
    result = parser.parse(f"{HEADER}\n01/03/2026;1;X;;{credit};\n")
    assert result.rows[0].amount == Decimal("12.50")


def test_reference_is_trimmed_and_optional():
    result = parser.parse(f"{HEADER}\n01/03/2026; 77 ;X;1,00;;\n01/03/2026;;Y;2,00;;\n")
    assert [r.bank_reference for r in result.rows] == ["77", None]


def test_row_errors():
    content = "\n".join(
        [
            HEADER,
            "2026-03-01;1;ISO DATE;1,00;;",
            "31/02/2026;2;IMPOSSIBLE DATE;1,00;;",
            "01/03/2026;3;NO AMOUNT;;;",
            "01/03/2026;4;BAD DEBIT;douze;;",
            "01/03/2026;5;;1,00;;",
        ]
    )
    assert _errors(content) == [
        (1, "invalid date: 2026-03-01"),
        (2, "invalid date: 31/02/2026"),
        (3, "missing amount"),
        (4, "invalid amount: douze"),
        (5, "missing label"),
    ]


def test_missing_columns():
    assert _errors("Date;Libellé;Débit\n") == [
        (0, "missing required columns: Numéro d'opération, Crédit")
    ]
