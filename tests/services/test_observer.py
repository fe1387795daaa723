"""Tests for the structlog retry observer."""

from __future__ import annotations

import logging

from structlog.testing import capture_logs

from cqbus.services.observer import DISPATCH_LOGGER, RetryObserver, StructlogRetryObserver
from tests.conftest import Ping, RecordingObserver


class TestStructlogRetryObserver:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(StructlogRetryObserver(), RetryObserver)
        assert isinstance(RecordingObserver(), RetryObserver)

    def test_warning_enabled_follows_logger_level(self) -> None:
        stdlib_logger = logging.getLogger(DISPATCH_LOGGER)
        original = stdlib_logger.level
        try:
            stdlib_logger.setLevel(logging.ERROR)
            assert StructlogRetryObserver().is_warning_enabled() is False
            stdlib_logger.setLevel(logging.WARNING)
            assert StructlogRetryObserver().is_warning_enabled() is True
        finally:
            stdlib_logger.setLevel(original)

    def test_emits_retry_event(self) -> None:
        error = NotImplementedError("not yet")
        with capture_logs() as logs:
            StructlogRetryObserver().log_retry_warning(Ping, 2, 400, error)

        (event,) = logs
        assert event["event"] == "dispatch.retry"
        assert event["log_level"] == "warning"
        assert event["request_type"] == "tests.conftest.Ping"
        assert event["attempt"] == 2
        assert event["delay_ms"] == 400
        assert event["error"] == "NotImplementedError: not yet"
        assert event["exc_info"] is error

    def test_custom_logger_name(self) -> None:
        stdlib_logger = logging.getLogger("app.retries")
        original = stdlib_logger.level
        try:
            stdlib_logger.setLevel(logging.CRITICAL)
            assert StructlogRetryObserver("app.retries").is_warning_enabled() is False
        finally:
            stdlib_logger.setLevel(original)
