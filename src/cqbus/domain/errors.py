"""Error hierarchy for dispatch failures.

Every failure kind is its own class with a stable ``code`` so callers can
discriminate without inspecting messages. Errors raised by handlers are not
part of this hierarchy: they propagate unchanged unless retries run out, in
which case they become the ``__cause__`` of a :class:`RetryExhaustedError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from cqbus.domain.requests import type_name


class DispatchError(Exception):
    """Base error for all cqbus errors."""

    code = "DISPATCH_ERROR"

    def detail(self) -> dict[str, Any]:
        """Structured fields for result payloads and log events."""
        return {}


class ConfigurationError(DispatchError):
    """The backoff policy (or the file it was loaded from) is invalid.

    Raised before any attempt is made. ``violations`` holds every problem
    found, one human-readable sentence each.
    """

    code = "INVALID_CONFIGURATION"

    def __init__(self, violations: Sequence[str], *, header: str = "Validation failed.") -> None:
        self.violations = list(violations)
        lines = [header, *(f" - {violation}" for violation in self.violations)]
        super().__init__("\n".join(lines))

    def detail(self) -> dict[str, Any]:
        return {"violations": self.violations}


class ResolutionError(DispatchError):
    """Zero or several handlers are registered for a request type."""

    code = "HANDLER_RESOLUTION"

    def __init__(self, request_type: type, count: int, *, kind: str = "request") -> None:
        self.request_type = request_type
        self.count = count
        found = "none was found" if count < 1 else f"{count} were found"
        super().__init__(
            f"Exactly one handler was expected for {kind} of type "
            f"'{type_name(request_type)}', but {found}."
        )

    def detail(self) -> dict[str, Any]:
        return {"request_type": type_name(self.request_type), "count": self.count}


class InvocationContractError(DispatchError):
    """The resolved handler cannot be called the way the dispatcher expects."""

    code = "INVOCATION_CONTRACT"

    def __init__(self, message: str, *, handler: object | None = None) -> None:
        self.handler = handler
        super().__init__(message)


class RetryDelayError(DispatchError):
    """A retry strategy produced a negative delay."""

    code = "INVALID_RETRY_DELAY"

    def __init__(self, delay: int) -> None:
        self.delay = delay
        super().__init__(f"The retry delay '{delay}' should be greater than or equal to 0ms.")

    def detail(self) -> dict[str, Any]:
        return {"delay_ms": self.delay}


class RetryExhaustedError(DispatchError):
    """Every allowed attempt failed; ``__cause__`` is the last handler error."""

    code = "RETRY_EXHAUSTED"

    def __init__(self, request_type: type, attempts: int, *, kind: str = "request") -> None:
        self.request_type = request_type
        self.attempts = attempts
        super().__init__(
            f"{kind.capitalize()} '{type_name(request_type)}' execution failed after "
            f"{attempts} attempts. See the cause for more detail."
        )

    def detail(self) -> dict[str, Any]:
        return {"request_type": type_name(self.request_type), "attempts": self.attempts}


class DispatchCancelledError(DispatchError):
    """Cancellation was requested before an attempt or during a retry wait."""

    code = "CANCELLED"

    def __init__(self, request_type: type, attempts: int) -> None:
        self.request_type = request_type
        self.attempts = attempts
        super().__init__(
            f"Dispatch of '{type_name(request_type)}' was cancelled after {attempts} attempts."
        )

    def detail(self) -> dict[str, Any]:
        return {"request_type": type_name(self.request_type), "attempts": self.attempts}
