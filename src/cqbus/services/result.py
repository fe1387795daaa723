"""DispatchResult and DispatchFailure — non-raising dispatch outcome.

``Dispatcher.try_execute`` returns a DispatchResult instead of raising, so
adapters (CLI, web handlers) can branch on ``error.code``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from cqbus.domain.errors import DispatchError
from cqbus.domain.requests import type_name

HANDLER_ERROR = "HANDLER_ERROR"


class DispatchFailure(BaseModel):
    """Structured error payload within a DispatchResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: Exception) -> DispatchFailure:
        if isinstance(exc, DispatchError):
            return cls(code=exc.code, message=str(exc), detail=exc.detail())
        return cls(
            code=HANDLER_ERROR,
            message=str(exc),
            detail={"type": type_name(type(exc))},
        )


class DispatchResult(BaseModel):
    """Outcome of one dispatch call.

    Attributes:
        ok: Whether the handler eventually succeeded.
        op: Qualified name of the request type.
        value: The handler's result on success.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    ok: bool
    op: str
    value: Any = None
    error: DispatchFailure | None = None
