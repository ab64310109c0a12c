"""CLI tests driven through Typer's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from httpslots import __version__
from httpslots.app import app
from httpslots.client import AsyncClient


class CountingHandler:
    def __init__(self, *statuses: int) -> None:
        self.statuses = list(statuses) or [200]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return httpx.Response(status, json={"path": request.url.path})


@pytest.fixture
def handler(monkeypatch, isolated_config: Path) -> CountingHandler:
    """Route every CLI request to an in-memory handler."""
    counting = CountingHandler()

    def fake_open(config, **kwargs):
        return AsyncClient.from_config(
            config, transport=httpx.MockTransport(counting), **kwargs
        )

    monkeypatch.setattr("httpslots.commands.request._open_client", fake_open)
    return counting


def _invoke(cli_runner, *args: str):
    return cli_runner.invoke(app, ["--no-color", "--json", *args])


class TestVersion:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestRequestCommand:
    def test_get_prints_body_and_counts(self, cli_runner, handler) -> None:
        result = _invoke(cli_runner, "request", "get", "https://api.example.com/users")

        assert result.exit_code == 0, result.output
        assert '"path": "/users"' in result.output
        assert "HTTP 200 OK" in result.output
        assert "1 request(s), 1 transport call(s)" in result.output

    def test_repeated_get_is_cached(self, cli_runner, handler) -> None:
        result = _invoke(
            cli_runner, "request", "get", "https://api.example.com/users", "--repeat", "3"
        )
        assert result.exit_code == 0, result.output
        assert "3 request(s), 1 transport call(s)" in result.output
        assert len(handler.requests) == 1

    def test_no_cache_sequential_makes_every_call(self, cli_runner, handler) -> None:
        result = _invoke(
            cli_runner,
            "request",
            "get",
            "https://api.example.com/users",
            "--repeat",
            "3",
            "--no-cache",
        )
        assert "3 request(s), 3 transport call(s)" in result.output

    def test_concurrent_requests_are_shared(self, cli_runner, handler) -> None:
        result = _invoke(
            cli_runner,
            "request",
            "get",
            "https://api.example.com/users",
            "--repeat",
            "4",
            "--concurrent",
            "--no-cache",
        )
        assert result.exit_code == 0, result.output
        assert "4 request(s), 1 transport call(s)" in result.output

    def test_base_url_option(self, cli_runner, handler) -> None:
        result = cli_runner.invoke(
            app,
            ["--no-color", "--base-url", "https://api.example.com", "request", "get", "/orders"],
        )
        assert result.exit_code == 0, result.output
        assert str(handler.requests[0].url) == "https://api.example.com/orders"

    def test_params_and_headers(self, cli_runner, handler) -> None:
        result = _invoke(
            cli_runner,
            "request",
            "get",
            "https://api.example.com/users",
            "-P",
            "page=2",
            "-H",
            "X-Trace: abc",
        )
        assert result.exit_code == 0, result.output
        sent = handler.requests[0]
        assert sent.url.params["page"] == "2"
        assert sent.headers["x-trace"] == "abc"

    def test_json_body(self, cli_runner, handler) -> None:
        result = _invoke(
            cli_runner, "request", "post", "https://api.example.com/users", "-d", '{"name": "x"}'
        )
        assert result.exit_code == 0, result.output
        assert json.loads(handler.requests[0].content) == {"name": "x"}

    def test_not_found_exits_with_http_error(self, cli_runner, handler) -> None:
        handler.statuses = [404]
        result = _invoke(cli_runner, "request", "get", "https://api.example.com/missing")

        assert result.exit_code == 5
        assert "Error: Request failed with status code 404" in result.output
        assert len(handler.requests) == 1

    def test_server_error_is_retried(self, cli_runner, handler) -> None:
        handler.statuses = [503, 200]
        result = _invoke(cli_runner, "request", "get", "https://api.example.com/flaky")

        assert result.exit_code == 0, result.output
        assert "1 request(s), 2 transport call(s)" in result.output

    def test_no_retry(self, cli_runner, handler) -> None:
        handler.statuses = [503, 200]
        result = _invoke(
            cli_runner, "request", "get", "https://api.example.com/flaky", "--no-retry"
        )
        assert result.exit_code == 5
        assert len(handler.requests) == 1

    def test_max_retries(self, cli_runner, handler) -> None:
        handler.statuses = [503]
        result = _invoke(
            cli_runner, "request", "get", "https://api.example.com/flaky", "--max-retries", "1"
        )
        assert result.exit_code == 5
        assert len(handler.requests) == 2

    def test_invalid_param_is_usage_error(self, cli_runner, handler) -> None:
        result = _invoke(
            cli_runner, "request", "get", "https://api.example.com/users", "-P", "novalue"
        )
        assert result.exit_code == 2
        assert "Invalid --param value" in result.output
        assert handler.requests == []


class TestConfigCommands:
    def test_set_and_show(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", "retry.max_times", "5"])
        assert result.exit_code == 0, result.output
        assert "Set retry.max_times = 5" in result.output

        result = cli_runner.invoke(app, ["--no-color", "--json", "config", "show"])
        assert result.exit_code == 0, result.output
        assert '"max_times": 5' in result.output

    def test_set_boolean_slot(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", "cache", "false"])
        assert result.exit_code == 0, result.output

        from httpslots.config import load_global_config

        assert load_global_config().cache is False

    def test_unknown_key(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "config", "set", "nope", "1"])
        assert result.exit_code == 2
        assert "Unknown config key" in result.output

    def test_invalid_value(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", "config", "set", "retry.max_times", "many"]
        )
        assert result.exit_code == 2
        assert "Validation error" in result.output

    def test_reset(self, cli_runner, isolated_config: Path) -> None:
        cli_runner.invoke(app, ["--no-color", "config", "set", "base_url", "https://x"])
        result = cli_runner.invoke(app, ["--no-color", "config", "reset", "--force"])
        assert result.exit_code == 0, result.output

        from httpslots.config import load_global_config

        assert load_global_config().base_url is None
