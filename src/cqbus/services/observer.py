"""Retry observability sink.

The dispatcher reports each scheduled retry to an optional
:class:`RetryObserver`. The default implementation writes a structlog
warning event; tests substitute a recording observer.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import structlog

from cqbus.domain.requests import type_name

DISPATCH_LOGGER = "cqbus.dispatch"


@runtime_checkable
class RetryObserver(Protocol):
    """Receives one event per retry the dispatcher is about to perform."""

    def is_warning_enabled(self) -> bool: ...

    def log_retry_warning(
        self,
        request_type: type,
        attempt: int,
        delay_ms: int,
        error: BaseException,
    ) -> None: ...


class StructlogRetryObserver:
    """Emit ``dispatch.retry`` warnings through structlog.

    Level filtering follows the stdlib logger of the same name, which
    :func:`cqbus.config.logging.configure_logging` sets up.
    """

    def __init__(self, logger_name: str = DISPATCH_LOGGER) -> None:
        self._logger_name = logger_name
        self._log = structlog.get_logger(logger_name)

    def is_warning_enabled(self) -> bool:
        return logging.getLogger(self._logger_name).isEnabledFor(logging.WARNING)

    def log_retry_warning(
        self,
        request_type: type,
        attempt: int,
        delay_ms: int,
        error: BaseException,
    ) -> None:
        self._log.warning(
            "dispatch.retry",
            request_type=type_name(request_type),
            attempt=attempt,
            delay_ms=delay_ms,
            error=f"{type(error).__name__}: {error}",
            exc_info=error,
        )
