"""Tests for log-level handling and the uvicorn entry point."""

import logging

import pytest

import main
from utils.logger import resolve_level


@pytest.mark.parametrize(
    "level,expected",
    [
        ("WARN", logging.WARNING),
        ("warning", logging.WARNING),
        ("debug", logging.DEBUG),
        ("10", logging.DEBUG),
        (logging.ERROR, logging.ERROR),
        ("nonsense", logging.INFO),
    ],
)
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_main_passes_numeric_log_level(monkeypatch):
    captured = {}

    def fake_run(app, **kwargs):
        captured.update(kwargs)

    monkeypatch.setattr(main, "LOG_LEVEL", "WARN")
    monkeypatch.setattr(main.uvicorn, "run", fake_run)
    main.main()

    assert captured["log_level"] == logging.WARNING
    assert captured["reload"] is False
