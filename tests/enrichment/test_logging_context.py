from __future__ import annotations

import json
import logging

from enrichment.logging_manager import (
    JSONLogFormatter,
    LogContextFilter,
    get_log_context,
    log_context,
)


def _record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("enrichment.test", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_values_are_attached_and_restored() -> None:
    with log_context(session_id=5):
        with log_context(word_id=9):
            record = _record("hello", event="test.event")
            LogContextFilter().filter(record)
            assert get_log_context() == {"session_id": 5, "word_id": 9}
        assert get_log_context() == {"session_id": 5}
    assert get_log_context() == {}

    payload = json.loads(JSONLogFormatter().format(record))
    assert payload["message"] == "hello"
    assert payload["session_id"] == 5
    assert payload["word_id"] == 9
    assert payload["event"] == "test.event"


def test_unknown_extra_fields_are_nested() -> None:
    payload = json.loads(JSONLogFormatter().format(_record("x", attempt=2)))

    assert payload["extra"] == {"attempt": 2}
