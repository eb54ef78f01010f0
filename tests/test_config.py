"""Tests for configuration parsing and JSON logging."""

import json
import logging

from app.core.config import _parse_file_upload_patterns, get_config_summary
from app.logging_config import JsonFormatter


class TestFileUploadPatterns:
    def test_defaults(self, monkeypatch):
        """Without the env var the built-in patterns are used."""
        monkeypatch.delenv("BENEFIT_FORM_FILE_UPLOAD_PATTERNS", raising=False)
        patterns = _parse_file_upload_patterns()
        assert "photo" in patterns
        assert "signature" in patterns

    def test_env_override(self, monkeypatch):
        """Comma-separated patterns are lowercased and stripped."""
        monkeypatch.setenv("BENEFIT_FORM_FILE_UPLOAD_PATTERNS", " Scan, ,Thumb ")
        assert _parse_file_upload_patterns() == ("scan", "thumb")

    def test_summary(self):
        """The summary exposes system fields sorted."""
        assert get_config_summary()["system_fields"] == ["benefitId", "docs", "orderId"]


class TestJsonFormatter:
    def test_extra_keys(self):
        """Known extras are emitted alongside the message."""
        record = logging.LogRecord(
            "app.benefits.registry", logging.WARNING, __file__, 1,
            "Skipped duplicate field creation: casteCert", None, None,
        )
        record.field_name = "casteCert"
        payload = json.loads(JsonFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "app.benefits.registry"
        assert payload["msg"] == "Skipped duplicate field creation: casteCert"
        assert payload["field_name"] == "casteCert"
        assert "benefit_id" not in payload
