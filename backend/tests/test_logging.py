"""
Tests for logging helpers and the request logging middleware.
"""

import json
import logging

from health_navigator.core.logging_config import (
    JSONFormatter,
    LoggerAdapter,
    filter_sensitive_data,
    redact_url,
    truncate_large_data,
)
from health_navigator.middleware.logging_middleware import _extract_error_reason, _sanitize_body


class TestSensitiveData:

    def test_masks_nested_keys(self):
        data = {
            "custom_token": "abc",
            "fragment": "#access_token=ya29&state=google-fit-connect",
            "payload": {"Authorization": "Bearer x", "name": "Aspirin"},
        }
        filtered = filter_sensitive_data(data)
        assert filtered["custom_token"] == "***FILTERED***"
        assert filtered["fragment"] == "***FILTERED***"
        assert filtered["payload"]["Authorization"] == "***FILTERED***"
        assert filtered["payload"]["name"] == "Aspirin"

    def test_token_counts_kept(self):
        filtered = filter_sensitive_data({"prompt_tokens": 12, "total_tokens": 20})
        assert filtered == {"prompt_tokens": 12, "total_tokens": 20}

    def test_redact_url(self):
        url = "https://generativelanguage.googleapis.com/v1beta/models/m:generateContent?key=SECRET"
        assert redact_url(url).endswith("?key=***")
        assert "SECRET" not in redact_url(url)

    def test_truncate(self):
        assert truncate_large_data("abc", max_length=5) == "abc"
        assert truncate_large_data("a" * 10, max_length=5).startswith("aaaaa... (truncated")


class TestFormatters:

    def test_json_formatter_includes_extra_fields(self):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)
        record.extra_fields = {"user_id": "u1", "access_token": "ya29"}
        output = json.loads(JSONFormatter().format(record))
        assert output["message"] == "hello"
        assert output["user_id"] == "u1"
        assert output["access_token"] == "***FILTERED***"

    def test_adapter_merges_context(self):
        adapter = LoggerAdapter(logging.getLogger("test"), {"user_id": "u1"})
        _, kwargs = adapter.process("msg", {"extra": {"extra_fields": {"record_id": "r1"}}})
        assert kwargs["extra"]["extra_fields"] == {"user_id": "u1", "record_id": "r1"}


class TestMiddlewareHelpers:

    def test_sanitize_body(self):
        body = json.dumps({"fragment": "#access_token=x", "text": "hi"}).encode()
        sanitized = json.loads(_sanitize_body(body))
        assert sanitized == {"fragment": "***FILTERED***", "text": "hi"}

    def test_extract_error_reason(self):
        assert _extract_error_reason('{"detail": "All fields are required."}') == "All fields are required."
        assert _extract_error_reason("") is None
