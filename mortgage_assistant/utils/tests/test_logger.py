"""Tests for the structured logger."""

import json

import pytest

from mortgage_assistant.utils.logger import crop_text, logger


class _LiveRecords:
    """Reads caplog.records lazily; pytest swaps the list between test phases."""

    def __init__(self, caplog):
        self._caplog = caplog

    def __getitem__(self, index):
        return self._caplog.records[index]

    def __len__(self):
        return len(self._caplog.records)


@pytest.fixture
def records(caplog):
    logger.logger.addHandler(caplog.handler)
    yield _LiveRecords(caplog)
    logger.logger.removeHandler(caplog.handler)


def render(record) -> dict:
    formatter = logger.logger.handlers[0].formatter
    return json.loads(formatter.format(record))


def test_keyword_arguments_become_json_fields(records):
    logger.info("Starting new session", session_id="abc-123", message_count=0)

    line = render(records[-1])
    assert line["message"] == "Starting new session"
    assert line["session_id"] == "abc-123"
    assert line["message_count"] == 0
    assert line["log_level"] == "INFO"


def test_location_points_at_the_caller(records):
    logger.error("Chat turn failed", error="boom")

    line = render(records[-1])
    assert line["file"] == "test_logger.py"
    assert line["error"] == "boom"


def test_exception_keeps_traceback(records):
    try:
        raise RuntimeError("upstream down")
    except RuntimeError:
        logger.exception("Unexpected error in chat turn", layer="chat_service")

    record = records[-1]
    assert record.exc_info is not None
    assert record.filename == "test_logger.py"
    assert record.layer == "chat_service"


@pytest.mark.parametrize(
    "text, expected",
    [
        (None, ""),
        ("", ""),
        ("short", "short"),
        ("x" * 60, "x" * 50 + "..."),
    ],
)
def test_crop_text(text, expected):
    assert crop_text(text) == expected
