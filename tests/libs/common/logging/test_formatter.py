"""Tests for JSON log formatter.

Tests verify that logs are formatted correctly with:
- Required schema fields (timestamp, level, service, run_id, message)
- Optional context fields, with credentials masked
- Exception information
- Source location
"""

import json
import logging
import sys

import pytest

from libs.common.logging.formatter import MASK, JSONFormatter, mask_sensitive


def _record(msg: str = "Test message", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="/path/to/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    @pytest.fixture
    def formatter(self) -> JSONFormatter:
        return JSONFormatter(service_name="test_service")

    def test_basic_log_format(self, formatter: JSONFormatter) -> None:
        record = _record()
        record.run_id = "run-123"

        log_dict = json.loads(formatter.format(record))

        assert "timestamp" in log_dict
        assert log_dict["level"] == "INFO"
        assert log_dict["service"] == "test_service"
        assert log_dict["run_id"] == "run-123"
        assert log_dict["message"] == "Test message"
        assert log_dict["source"] == {"file": "/path/to/file.py", "line": 42, "function": None}

    def test_timestamp_format(self, formatter: JSONFormatter) -> None:
        assert formatter._format_timestamp(1697884200.0) == "2023-10-21T10:30:00.000Z"

    def test_extra_fields_become_context(self, formatter: JSONFormatter) -> None:
        record = _record()
        record.namespace = "prod/my-app"

        log_dict = json.loads(formatter.format(record))

        assert log_dict["context"] == {"namespace": "prod/my-app"}

    def test_no_context_key_without_extras(self, formatter: JSONFormatter) -> None:
        assert "context" not in json.loads(formatter.format(_record()))

    def test_context_disabled(self) -> None:
        record = _record()
        record.namespace = "prod/my-app"

        log_dict = json.loads(JSONFormatter(service_name="x", include_context=False).format(record))

        assert "context" not in log_dict

    def test_credentials_masked(self, formatter: JSONFormatter) -> None:
        record = _record()
        record.context = {"secret_id": "s3cr3t", "namespace": "a"}

        output = formatter.format(record)

        assert "s3cr3t" not in output
        assert json.loads(output)["context"]["secret_id"] == MASK

    def test_exception_info(self, formatter: JSONFormatter) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(exc_info=sys.exc_info())

        log_dict = json.loads(formatter.format(record))

        assert log_dict["exception"]["type"] == "ValueError"
        assert log_dict["exception"]["message"] == "boom"
        assert "Traceback" in log_dict["exception"]["traceback"]


class TestMaskSensitive:
    def test_masks_known_keys_case_insensitive(self) -> None:
        assert mask_sensitive({"Token": "hvs.x", "role": "my-app"}) == {
            "Token": MASK,
            "role": "my-app",
        }

    def test_empty_values_left_alone(self) -> None:
        assert mask_sensitive({"secret_id": ""}) == {"secret_id": ""}
