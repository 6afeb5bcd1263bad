from __future__ import annotations

import io
import logging

import pytest

from moulax.logging_setup import configure_logging, get_logger, resolve_level


@pytest.mark.parametrize(
    ("value", "expected"),
    [("debug", logging.DEBUG), (" WARNING ", logging.WARNING), ("15", 15), ("loud", logging.INFO)],
)
def test_resolve_level(value, expected):
    assert resolve_level(value) == expected


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("MOULAX_LOG_LEVEL", "error")
    assert resolve_level() == logging.ERROR


def test_configure_logging_is_idempotent():
    stream = io.StringIO()
    logger = configure_logging("INFO", stream=stream, fmt="%(name)s %(message)s")
    again = configure_logging("DEBUG", stream=io.StringIO())
    assert again is logger
    assert len([h for h in logger.handlers if isinstance(h, logging.StreamHandler)]) == 1

    get_logger("moulax.imports").info("hello")
    get_logger("moulax.imports").debug("hidden")
    assert stream.getvalue() == "moulax.imports hello\n"
