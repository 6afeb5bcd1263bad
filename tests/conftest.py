"""Pytest configuration shared by the whole suite.

Makes the workspace importable without an install (``packages/`` for
``moulax``, ``libs/db/src`` for ``db``, the repo root for ``tests.helpers``)
and keeps global state from leaking between tests: the ``moulax`` logging
handler and the process-wide SQLAlchemy engine are reset after every test.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PATHS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]

FIXTURES = _ROOT / "tests" / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch: pytest.MonkeyPatch):
    """Drop env overrides and reset the logging handler and the shared engine."""

    from db.client import dispose_engine
    from moulax.logging_setup import reset_logging

    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("MOULAX_LOG_LEVEL", raising=False)
    yield
    reset_logging()
    dispose_engine()
