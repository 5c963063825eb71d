"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from websearch_mcp.config.settings import Settings, get_settings


def test_defaults(monkeypatch):
    for var in ("DEFAULT_SHELL", "SEARXNG_BASE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(var)
    settings = Settings()

    assert settings.transport == "http"
    assert settings.port == 3000
    assert settings.default_shell == "/bin/bash"
    assert settings.searxng_base_url == "http://127.0.0.1:8888"
    assert settings.tool_name_conflict == "replace"
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TRANSPORT", "stdio")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("NASA_API_KEY", "abc")

    settings = Settings()
    assert settings.transport == "stdio"
    assert settings.port == 8080
    assert settings.nasa_api_key == "abc"


def test_dotenv_file_is_read(tmp_path, monkeypatch):
    monkeypatch.delenv("SEARXNG_BASE_URL")
    (tmp_path / ".env").write_text("SEARXNG_BASE_URL=http://from-dotenv:8888\n", encoding="utf-8")
    assert Settings().searxng_base_url == "http://from-dotenv:8888"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


@pytest.mark.parametrize(
    "var, value",
    [("TOOL_NAME_CONFLICT", "ignore"), ("TRANSPORT", "websocket")],
)
def test_rejects_unknown_choices_at_load(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(ValidationError):
        Settings()
