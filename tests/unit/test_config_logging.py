"""Settings and logging setup tests."""

import json
import logging

from math_tutor.core.config import Settings
from math_tutor.core.logging import JsonFormatter


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")
    monkeypatch.setenv("openai_max_tokens", "512")
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://tutor.example, ,http://localhost:3000")
    settings = Settings(_env_file=None)
    assert settings.OPENAI_MODEL == "gpt-4o"
    assert settings.OPENAI_MAX_TOKENS == 512
    assert settings.cors_origins == ["https://tutor.example", "http://localhost:3000"]


def test_preferences_path_is_expanded(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    settings = Settings(_env_file=None, PREFERENCES_PATH="~/prefs.json")
    assert settings.preferences_file == tmp_path / "prefs.json"


def test_json_formatter():
    record = logging.LogRecord("math_tutor.test", logging.WARNING, __file__, 1, "parsed %d items", (3,), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "math_tutor.test"
    assert payload["message"] == "parsed 3 items"
    assert "exception" not in payload


def test_json_formatter_includes_tutor_context():
    record = logging.LogRecord("math_tutor.api", logging.INFO, __file__, 1, "Streaming tutor answer", (), None)
    record.request_type = "hint"
    record.grade = "8th Grade"
    record.stream = True
    payload = json.loads(JsonFormatter().format(record))
    assert payload["request_type"] == "hint"
    assert payload["grade"] == "8th Grade"
    assert payload["stream"] is True
    assert "topic" not in payload
    assert "error_id" not in payload
