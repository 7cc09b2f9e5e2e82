"""Tests for log formatting of context fields."""

import json
import logging

from formulary_service.config import settings
from formulary_service.utils.error_codes import ErrorCode
from formulary_service.utils.logging import build_formatter


def _record(**extra):
    return logging.makeLogRecord(
        {"name": "formulary_service.test", "levelno": logging.ERROR, "levelname": "ERROR", "msg": "boom", **extra}
    )


def test_plain_formatter_appends_context():
    line = build_formatter("development").format(
        _record(request_id="req-1", code=ErrorCode.PARTIAL_BATCH_FAILURE)
    )

    assert line.endswith("boom [request_id=req-1 code=partial_batch_failure]")


def test_plain_formatter_without_context():
    line = build_formatter("development").format(_record())

    assert line.endswith("ERROR - boom")


def test_json_formatter_emits_context_fields():
    payload = json.loads(
        build_formatter("production").format(_record(request_id="req-1", plan_id="medicare-2024"))
    )

    assert payload["message"] == "boom"
    assert payload["level"] == "ERROR"
    assert payload["request_id"] == "req-1"
    assert payload["plan_id"] == "medicare-2024"
    assert payload["service"] == settings.app_name
    assert "timestamp" in payload
