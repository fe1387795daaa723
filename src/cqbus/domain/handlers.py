"""Handler contracts.

A handler is any object exposing ``handle(request, cancellation)``. It may
return the result directly or an awaitable of it, so synchronous and
``async def`` handlers register the same way.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

from cqbus.domain.requests import Command, Query

if TYPE_CHECKING:
    from cqbus.services.cancellation import CancellationToken

C = TypeVar("C", bound=Command, contravariant=True)
Q = TypeVar("Q", bound=Query, contravariant=True)
R = TypeVar("R", covariant=True)


@runtime_checkable
class CommandHandler(Protocol[C, R]):
    """Processes one command type."""

    def handle(self, command: C, cancellation: CancellationToken) -> R | Awaitable[R]: ...


@runtime_checkable
class QueryHandler(Protocol[Q, R]):
    """Processes one query type."""

    def handle(self, query: Q, cancellation: CancellationToken) -> R | Awaitable[R]: ...
