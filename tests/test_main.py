"""Tests for the command-line entry point's one-shot modes."""

import json

import pytest

from websearch_mcp import main as cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr("sys.argv", ["websearch-mcp", *argv])
    cli.main()


def test_list_tools(monkeypatch, capsys):
    run_cli(monkeypatch, "--list-tools")
    out = capsys.readouterr().out
    assert "- get_links:" in out
    assert "- create_terminal:" in out


def test_list_adapters(monkeypatch, capsys):
    run_cli(monkeypatch, "--list-adapters")
    out = capsys.readouterr().out
    assert "- web-search:" in out
    assert "tools: get_links, scrape_links" in out


def test_call_prints_result_and_exits_zero(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc_info:
        run_cli(monkeypatch, "--call", "mock_news", "--args", '{"limit": 1}')
    assert exc_info.value.code == 0
    assert json.loads(capsys.readouterr().out)["total_results"] == 1


def test_call_error_exits_one(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc_info:
        run_cli(monkeypatch, "--call", "nope")
    assert exc_info.value.code == 1
    assert json.loads(capsys.readouterr().out)["error"] == "Unknown tool: nope"


def test_call_rejects_non_object_args(monkeypatch):
    with pytest.raises(SystemExit) as exc_info:
        run_cli(monkeypatch, "--call", "mock_news", "--args", "[1, 2]")
    assert exc_info.value.code == 2


def test_reload_requires_http(monkeypatch):
    with pytest.raises(SystemExit) as exc_info:
        run_cli(monkeypatch, "--transport", "stdio", "--reload")
    assert exc_info.value.code == 2


def test_make_adapter(monkeypatch, tmp_path):
    created = {}

    def fake_make(name, *, description=None):
        created.update(name=name, description=description)

    monkeypatch.setattr(
        "websearch_mcp.commands.make_adapter.run_make_adapter", fake_make
    )
    run_cli(monkeypatch, "--make-adapter", "sports", "--description", "Scores")
    assert created == {"name": "sports", "description": "Scores"}
