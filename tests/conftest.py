"""Shared test fixtures for httpslots.

Provides reusable fixtures for building requests and responses, a scripted
fake transport, a controllable clock, isolated config environments, output
state management, and a CLI runner. These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional, Union

import pytest

from httpslots.models import RequestConfig, Response
from httpslots.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once CliRunner restores the streams.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Request / response builders
# ---------------------------------------------------------------------------


def _build_request(**overrides: Any) -> RequestConfig:
    fields: dict[str, Any] = {
        "base_url": "https://api.example.com",
        "url": "/users",
        "method": "get",
        "headers": {"accept": "application/json"},
    }
    fields.update(overrides)
    return RequestConfig(**fields)


@pytest.fixture
def make_request() -> Callable[..., RequestConfig]:
    """Factory for :class:`RequestConfig` objects with sensible defaults."""
    return _build_request


@pytest.fixture
def make_response() -> Callable[..., Response]:
    """Factory for :class:`Response` objects tagged with a request."""

    def _make(
        status: int = 200,
        data: Any = None,
        config: Optional[RequestConfig] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Response:
        return Response(
            status=status,
            status_text="OK" if status < 400 else "Error",
            headers=headers if headers is not None else {"content-type": "application/json"},
            data={"users": [{"id": 1}]} if data is None else data,
            config=config,
        )

    return _make


# ---------------------------------------------------------------------------
# Fake transport and clock
# ---------------------------------------------------------------------------


Outcome = Union[Response, BaseException, Callable[[RequestConfig], Response]]


class ScriptedTransport:
    """An async continuation that replays scripted outcomes.

    Each call pops the next outcome (the last one repeats once the script
    runs out). Exceptions are raised, callables are invoked with the
    request, and responses are returned tagged with the request. When
    ``gate`` is set, every call waits on it first so tests can hold calls
    in flight.
    """

    def __init__(self, *outcomes: Outcome, gate: Optional[asyncio.Event] = None) -> None:
        self._outcomes = list(outcomes)
        self.gate = gate
        self.calls: list[RequestConfig] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def __call__(self, config: RequestConfig) -> Response:
        self.calls.append(config)
        if self.gate is not None:
            await self.gate.wait()
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, Response):
            return outcome.model_copy(update={"config": config})
        return outcome(config)


@pytest.fixture
def scripted_transport() -> type[ScriptedTransport]:
    """The :class:`ScriptedTransport` class, for building fake continuations."""
    return ScriptedTransport


class FakeClock:
    """A manually advanced clock returning seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    clears all HTTPSLOTS_* environment variables and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("httpslots.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "HTTPSLOTS_BASE_URL",
        "HTTPSLOTS_CACHE",
        "HTTPSLOTS_SHARE",
        "HTTPSLOTS_RETRY",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format output manager for the duration of a test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
