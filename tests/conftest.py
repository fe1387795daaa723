"""Shared pytest fixtures and test helpers for cqbus tests."""

from __future__ import annotations

import os
from typing import Any

import pytest
from click.testing import CliRunner

from cqbus.domain.requests import Command, Query
from cqbus.infrastructure.registry import HandlerRegistry
from cqbus.services.resolver import HandlerResolver

# ---------------------------------------------------------------------------
# Request types
# ---------------------------------------------------------------------------


class Ping(Command[str]):
    """Command answered with its own text."""

    def __init__(self, text: str = "ping") -> None:
        self.text = text


class Touch(Command[None]):
    """Command with no result."""


class CountItems(Query[int]):
    """Query answered with an integer."""


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


class EchoHandler:
    def __init__(self) -> None:
        self.calls = 0

    def handle(self, command: Ping, cancellation: Any) -> str:
        self.calls += 1
        return command.text


class NotImplementedHandler:
    """Always fails, counting attempts."""

    def __init__(self) -> None:
        self.calls = 0

    def handle(self, request: Any, cancellation: Any) -> Any:
        self.calls += 1
        raise NotImplementedError


class FlakyHandler:
    """Fails ``failures`` times with ConnectionError, then returns ``value``."""

    def __init__(self, failures: int, value: Any) -> None:
        self.failures = failures
        self.value = value
        self.calls = 0

    async def handle(self, request: Any, cancellation: Any) -> Any:
        self.calls += 1
        if self.calls <= self.failures:
            msg = f"transient failure {self.calls}"
            raise ConnectionError(msg)
        return self.value


class RecordingObserver:
    """Retry observer that keeps every event."""

    def __init__(self, *, enabled: bool = True) -> None:
        self.enabled = enabled
        self.events: list[tuple[type, int, int, BaseException]] = []

    def is_warning_enabled(self) -> bool:
        return self.enabled

    def log_retry_warning(
        self, request_type: type, attempt: int, delay_ms: int, error: BaseException
    ) -> None:
        self.events.append((request_type, attempt, delay_ms, error))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def registry() -> HandlerRegistry:
    return HandlerRegistry()


@pytest.fixture
def resolver(registry: HandlerRegistry) -> HandlerResolver:
    return HandlerResolver(registry)


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's cqbus.toml or CQBUS_* variables out of the tests."""
    for name in list(os.environ):
        if name.startswith("CQBUS_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
