"""Label cleaning rules for French retail bank exports.

Raw descriptions carry boilerplate around the merchant name: a card payment
marker with its date (``CARTE 10/02 CARREFOUR``), the card terminal suffix
(``... CB*1234``) and transfer markers (``VIR SEPA EMPLOYEUR``). The cleaned
label is what users see and what keyword rules are matched against; the raw
text is kept separately as ``original_label``.
"""

from __future__ import annotations

import re

_CARD_PREFIX_RE = re.compile(r"^CARTE \d{2}/\d{2}(?:/(?:\d{4}|\d{2}))?(?!\d)\s*")
_CARD_TERMINAL_RE = re.compile(r"\s*CB\*\d+\s*$")
_TRANSFER_PREFIX_RE = re.compile(r"^VIR(?:EMENT)? SEPA\s*", re.IGNORECASE)

SUPPLIER_SEPARATOR = "|"


def strip_markers(label: str) -> str:
    """Remove card and transfer boilerplate until nothing more matches.

    Repeating to a fixed point keeps the function idempotent when one marker
    uncovers another (``CARTE 10/02 VIR SEPA X`` → ``X``). A label made only
    of boilerplate is returned trimmed but otherwise unchanged.
    """

    current = label.strip()
    while True:
        cleaned = _CARD_PREFIX_RE.sub("", current)
        cleaned = _CARD_TERMINAL_RE.sub("", cleaned)
        cleaned = _TRANSFER_PREFIX_RE.sub("", cleaned).strip()
        if not cleaned:
            return current
        if cleaned == current:
            return cleaned
        current = cleaned


def clean_card_label(label: str) -> str:
    """Clean a Boursorama-style label.

    Newer exports put the resolved supplier first: ``"Carrefour | CARTE 10/02
    CARREFOUR CB*1234"``. When that form is present the supplier is the label
    and the details after the pipe are dropped. Markers are still stripped
    from the supplier itself, so a cleaned label cleans to itself.
    """

    if SUPPLIER_SEPARATOR in label:
        supplier = label.split(SUPPLIER_SEPARATOR, 1)[0].strip()
        if supplier:
            return strip_markers(supplier)
    return strip_markers(label)


__all__ = ["SUPPLIER_SEPARATOR", "clean_card_label", "strip_markers"]
