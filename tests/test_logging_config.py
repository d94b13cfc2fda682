from __future__ import annotations

import logging

from logging_config import ContextualFormatter, redact_credentials


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("services.weather", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    output = formatter.format(_record("Weather request served", city="Madrid", source="mock", ignored="x"))

    assert output == "Weather request served | city=Madrid source=mock"


def test_formatter_skips_missing_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record("plain", city=None)) == "plain"


def test_credentials_are_redacted() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    output = formatter.format(_record("GET https://api.test/weather?q=Madrid&appid=abc123 200"))

    assert "abc123" not in output
    assert "appid=***" in output
    assert redact_credentials("q=Paris&APPID=zzz") == "q=Paris&APPID=***"
