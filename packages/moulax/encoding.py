"""Best-effort text decoding for bank statement exports.

Banks ship CSV files in UTF-8 (with or without a byte-order mark) or in a
single-byte Western encoding. :func:`normalize` always returns text: valid
UTF-8 is decoded as such, anything else is read byte-for-byte as Latin-1.
Mixed or multi-byte legacy encodings other than Latin-1 come out garbled but
never raise.
"""

from __future__ import annotations

import re
import unicodedata

BOM = "\ufeff"
UTF8_BOM = BOM.encode("utf-8")

# UTF-8 sequences that were decoded as Latin-1/CP1252 somewhere upstream.
_MOJIBAKE: tuple[tuple[str, str], ...] = (
    ("Ã©", "é"),
    ("Ã¨", "è"),
    ("Ãª", "ê"),
    ("Ã«", "ë"),
    ("Ã ", "à"),
    ("Ã¢", "â"),
    ("Ã¹", "ù"),
    ("Ã»", "û"),
    ("Ã§", "ç"),
    ("Ã‰", "É"),
    ("Â", ""),
)

_XML_ESCAPE_RE = re.compile(r"_x([0-9A-Fa-f]{4})_")
_NON_TOKEN_RE = re.compile(r"[^a-z0-9]")
_NEWLINE_RE = re.compile(r"\r?\n")


def normalize(content: bytes | str) -> str:
    """Decode ``content`` to text and drop a leading byte-order mark.

    The UTF-8 mark is removed before decoding so a Latin-1 body behind it
    still decodes byte per code point.
    """

    if isinstance(content, str):
        text = content
    else:
        content = bytes(content).removeprefix(UTF8_BOM)
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError:
            # Every byte maps to the code point of the same value.
            return content.decode("latin-1")
    return text.removeprefix(BOM)


def repair_text(value: str) -> str:
    """Undo spreadsheet ``_xHHHH_`` escapes and common double-encoded accents."""

    def _unescape(match: re.Match[str]) -> str:
        codepoint = int(match.group(1), 16)
        return "" if codepoint < 0x20 else chr(codepoint)

    text = _XML_ESCAPE_RE.sub(_unescape, value)
    for broken, fixed in _MOJIBAKE:
        text = text.replace(broken, fixed)
    return text


def fold(value: str) -> str:
    """Reduce ``value`` to a lower-case ASCII token without accents or punctuation.

    ``"Date de début"`` and ``"DATE_DE_DEBUT"`` both fold to ``"datededebut"``.
    """

    decomposed = unicodedata.normalize("NFKD", value.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_TOKEN_RE.sub("", stripped)


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` and ``\\r\\n`` alike, dropping empty lines.

    Whitespace-only lines are kept so callers can count them as data rows.
    """

    return [line for line in _NEWLINE_RE.split(text) if line]


__all__ = ["BOM", "fold", "normalize", "repair_text", "split_lines"]
