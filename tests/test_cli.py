"""
Tests for the caching-proxy command.
"""

import dataclasses
import json
import socket

import pytest
from typer.testing import CliRunner

from caching_proxy import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def base_settings(monkeypatch, app_settings):
    """Start from test settings with no origin, whatever the environment says."""
    settings = dataclasses.replace(app_settings, origin=None)
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    return settings


@pytest.fixture
def served(monkeypatch):
    """Capture uvicorn.run calls instead of starting a server."""
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    return calls


def test_clear_cache(runner, cache_file):
    cache_file.write_text(json.dumps({"k": "v"}))

    result = runner.invoke(cli.app, ["--clear-cache", "--cache-file", str(cache_file)])

    assert result.exit_code == 0
    assert "Cache cleared successfully." in result.output
    assert not cache_file.exists()


def test_clear_cache_without_existing_file(runner, cache_file):
    result = runner.invoke(cli.app, ["-c", "--cache-file", str(cache_file)])

    assert result.exit_code == 0
    assert not cache_file.exists()


def test_origin_required(runner, served):
    result = runner.invoke(cli.app, ["--port", "3000"])

    assert result.exit_code == 2
    assert "--origin is required" in result.output
    assert served == []


def test_invalid_origin(runner, served):
    result = runner.invoke(cli.app, ["--origin", "ftp://example.com"])

    assert result.exit_code == 2
    assert served == []


def test_negative_ttl_rejected(runner, served):
    result = runner.invoke(cli.app, ["--origin", "https://api.example.com", "--ttl", "-1"])

    assert result.exit_code == 2
    assert served == []


def test_serves_with_overrides(runner, served, monkeypatch):
    monkeypatch.setattr(cli, "port_in_use", lambda host, port: False)

    result = runner.invoke(
        cli.app,
        ["-o", "https://api.example.com", "-p", "4321", "-t", "120", "--host", "127.0.0.1"],
    )

    assert result.exit_code == 0, result.output
    app, kwargs = served[0]
    assert kwargs["port"] == 4321
    assert kwargs["host"] == "127.0.0.1"
    assert app.state.settings.origin == "https://api.example.com"
    assert app.state.settings.cache_ttl == 120


def test_port_in_use(runner, served):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen()
        port = sock.getsockname()[1]

        result = runner.invoke(
            cli.app,
            ["--origin", "https://api.example.com", "--port", str(port), "--host", "127.0.0.1"],
        )

    assert result.exit_code == 1
    assert f"Port {port} is already in use" in result.output
    assert served == []
