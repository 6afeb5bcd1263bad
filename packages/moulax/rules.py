"""Keyword rule matching for auto-categorization and auto-tagging.

A rule matches a label when its keyword is a substring of the label, both
lower-cased with :meth:`str.lower` (no full Unicode case folding). Rules are
always evaluated from the highest priority down; equal priorities are ordered
by :func:`rule_sort_key` so the outcome never depends on storage fetch order.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import KeywordRule


def rule_sort_key(rule: KeywordRule) -> tuple[int, str, str, str]:
    """Priority descending, then keyword (case-insensitive, then exact), then target."""

    return (-rule.priority, rule.keyword.lower(), rule.keyword, rule.target_id)


def sort_rules(rules: Iterable[KeywordRule]) -> list[KeywordRule]:
    return sorted(rules, key=rule_sort_key)


def _matching(label: str | None, rules: Iterable[KeywordRule]) -> Iterable[KeywordRule]:
    if not label:
        return
    haystack = label.lower()
    for rule in sort_rules(rules):
        if rule.keyword.lower() in haystack:
            yield rule


def match_one(label: str | None, rules: Iterable[KeywordRule]) -> str | None:
    """Return the target of the first matching rule, or ``None``.

    Used for categories: a transaction gets at most one.
    """

    for rule in _matching(label, rules):
        return rule.target_id
    return None


def match_all(label: str | None, rules: Iterable[KeywordRule]) -> set[str]:
    """Return the targets of every matching rule (used for tags)."""

    return {rule.target_id for rule in _matching(label, rules)}


__all__ = ["match_all", "match_one", "rule_sort_key", "sort_rules"]
