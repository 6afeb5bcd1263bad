"""db: storage library for moulax (SQLAlchemy models, engine helpers, Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic targeting and test bootstrapping
- ORM models from ``db.models.finance``
- Engine/session helpers live in ``db.client``
"""

from __future__ import annotations

from .models.finance import (
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

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

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
    "metadata",
]
