"""Bank statement parsers and the registry that picks one for a file.

Detection is a pure function of the file content: every registered parser's
:meth:`~moulax.parsers.base.BankParser.detect` is tried in registration order
and the first match wins. Callers that already know the bank pass a hint to
skip detection.
"""

from __future__ import annotations

from ..logging_setup import get_logger
from ..models import ParseResult
from .base import BankParser
from .boursorama import BoursoramaParser
from .caisse_depargne import CaisseDepargneParser
from .revolut import RevolutParser

logger = get_logger("moulax.parsers")

UNKNOWN_FORMAT_MESSAGE = "Unknown statement format — no parser matched"

PARSERS: tuple[BankParser, ...] = (
    BoursoramaParser(),
    CaisseDepargneParser(),
    RevolutParser(),
)


class UnknownFormatError(LookupError):
    """No registered parser recognises the file's header."""


class UnknownBankError(LookupError):
    """A bank hint does not name a registered parser."""

    def __init__(self, bank: str) -> None:
        super().__init__(f"unknown bank: {bank!r}")
        self.bank = bank


def banks() -> list[str]:
    return [parser.bank for parser in PARSERS]


def detect_parser(content: bytes | str) -> BankParser:
    """Return the first registered parser whose header check accepts ``content``."""

    if content:
        for parser in PARSERS:
            if parser.detect(content):
                logger.debug("detected bank %s", parser.bank)
                return parser
    raise UnknownFormatError(UNKNOWN_FORMAT_MESSAGE)


def get_parser(bank: str) -> BankParser:
    """Resolve a bank code such as ``"revolut"`` (case-insensitive)."""

    wanted = bank.strip().lower()
    for parser in PARSERS:
        if parser.bank == wanted:
            return parser
    raise UnknownBankError(bank)


def parse_statement(
    content: bytes | str, bank: str | None = None
) -> tuple[BankParser, ParseResult]:
    parser = get_parser(bank) if bank else detect_parser(content)
    return parser, parser.parse(content)


__all__ = [
    "PARSERS",
    "UNKNOWN_FORMAT_MESSAGE",
    "BankParser",
    "BoursoramaParser",
    "CaisseDepargneParser",
    "RevolutParser",
    "UnknownBankError",
    "UnknownFormatError",
    "banks",
    "detect_parser",
    "get_parser",
    "parse_statement",
]
