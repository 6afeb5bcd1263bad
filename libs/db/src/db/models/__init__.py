"""ORM models for the moulax database (accounts, imports, transactions, rules)."""

from .finance import (
    Account,
    Base,
    CategorizationRule,
    Category,
    Import,
    Tag,
    TaggingRule,
    Transaction,
    TransactionTag,
)

__all__ = [
    "Account",
    "Base",
    "CategorizationRule",
    "Category",
    "Import",
    "Tag",
    "TaggingRule",
    "Transaction",
    "TransactionTag",
]
