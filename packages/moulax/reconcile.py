"""Deduplication policy for repeated imports into one account.

A stored transaction is identified by ``(date, amount, original_label,
occurrence)`` within its account. ``occurrence`` counts identical
``(date, amount, original_label)`` triples in file order, so two identical
coffees on the same day become occurrences 1 and 2 and a re-import of the
same (or an overlapping) export lands on the same keys.

For each parsed row:

- key not stored yet → ``added``;
- key stored by an earlier import → ``updated`` (the new import supersedes it);
- key stored as a manual entry → ``skipped`` (manual data is never overwritten).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

from .models import ImportSummary, ParsedRow, RowDecision, RowStatus, StoredSource, TransactionKey


def assign_occurrences(rows: Iterable[ParsedRow]) -> list[TransactionKey]:
    seen: Counter[tuple[object, ...]] = Counter()
    keys: list[TransactionKey] = []
    for row in rows:
        triple = (row.date, row.amount, row.original_label)
        seen[triple] += 1
        keys.append(TransactionKey(row.date, row.amount, row.original_label, seen[triple]))
    return keys


def decide(key: TransactionKey, existing: Mapping[TransactionKey, StoredSource]) -> RowStatus:
    source = existing.get(key)
    if source is None:
        return "added"
    if source == "import":
        return "updated"
    return "skipped"


def reconcile(
    rows: Sequence[ParsedRow], existing: Mapping[TransactionKey, StoredSource]
) -> list[RowDecision]:
    """Return one decision per row, in row order (``row_index`` is 1-based)."""

    return [
        RowDecision(row_index=i, row=row, key=key, status=decide(key, existing))
        for i, (row, key) in enumerate(zip(rows, assign_occurrences(rows), strict=True), start=1)
    ]


def summarize(decisions: Iterable[RowDecision]) -> ImportSummary:
    summary = ImportSummary()
    for decision in decisions:
        summary.rows_total += 1
        if decision.status == "skipped":
            summary.rows_skipped += 1
        else:
            summary.rows_imported += 1
    return summary


__all__ = ["assign_occurrences", "decide", "reconcile", "summarize"]
