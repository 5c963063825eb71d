"""Shared fixtures for websearch-mcp tests."""

import pytest
import pytest_asyncio

from websearch_mcp.config.settings import Settings, get_settings
from websearch_mcp.terminal.manager import TerminalSessionManager
from websearch_mcp.tools.tool_models import AdapterContext

API_KEY_VARS = (
    "OPENWEATHER_API_KEY",
    "WEATHERAPI_KEY",
    "NEWSAPI_KEY",
    "GUARDIAN_API_KEY",
    "NASA_API_KEY",
    "ALPHAVANTAGE_API_KEY",
)


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Keep tests away from a developer's .env and real API keys."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DEFAULT_SHELL", "/bin/sh")
    monkeypatch.setenv("DEFAULT_CWD", str(tmp_path))
    monkeypatch.setenv("SEARXNG_BASE_URL", "http://searxng.test")
    monkeypatch.setenv("TOOL_NAME_CONFLICT", "replace")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    for var in API_KEY_VARS:
        monkeypatch.setenv(var, "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings()


@pytest_asyncio.fixture
async def manager(tmp_path):
    """Manager for tests that spawn processes; kills leftovers on teardown."""
    terminals = TerminalSessionManager(default_cwd=str(tmp_path), default_shell="/bin/sh")
    yield terminals
    await terminals.shutdown()


@pytest.fixture
def context(settings, tmp_path):
    """Adapter context whose terminal manager is never used to spawn."""
    terminals = TerminalSessionManager(default_cwd=str(tmp_path), default_shell="/bin/sh")
    return AdapterContext(settings=settings, terminals=terminals)
