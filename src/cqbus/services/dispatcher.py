"""Dispatcher — resolve, invoke, and retry a request's handler.

One generic engine, instantiated as :class:`CommandBus` and :class:`QueryBus`.

State machine for one ``execute`` call::

    validate policy -> resolve -> [check cancel -> invoke] -> success
                                        ^             |
                                        |          failure
                                        |             v
                                     sleep <- should_retry? / limits

INVARIANT: A request proceeds through at most one attempt at a time, and the
dispatcher keeps no per-call state on the instance.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Protocol, TypeVar

from cqbus.config.models import BackoffPolicy
from cqbus.domain.errors import (
    DispatchCancelledError,
    RetryDelayError,
    RetryExhaustedError,
)
from cqbus.domain.requests import Command, Query, Request, RequestKind, type_name
from cqbus.services.backoff import BackoffCalculator, ensure_valid, retry_limit_reached
from cqbus.services.cancellation import CancellationToken
from cqbus.services.result import DispatchFailure, DispatchResult

if TYPE_CHECKING:
    from cqbus.services.observer import RetryObserver
    from cqbus.services.resolver import HandlerResolver

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=Request[Any])
ResultT = TypeVar("ResultT")


class RetryStrategy(Protocol):
    """Decides whether a failure is retried and how long to wait first."""

    def should_retry(self, request: Request[Any], error: Exception) -> bool: ...

    def delay_milliseconds(self, request: Request[Any], error: Exception, attempt: int) -> int: ...


class DefaultRetryStrategy:
    """Retry every failure; time retries with the policy's backoff."""

    def __init__(self, calculator: BackoffCalculator) -> None:
        self._calculator = calculator

    def should_retry(self, request: Request[Any], error: Exception) -> bool:
        return True

    def delay_milliseconds(self, request: Request[Any], error: Exception, attempt: int) -> int:
        return self._calculator.delay_milliseconds(attempt)


class Dispatcher(Generic[RequestT]):
    """Dispatch requests of one kind to their registered handler.

    Parameters:
        resolver: Looks up the single handler for a request type.
        policy: Backoff policy; validated at the start of every call.
        strategy: Retry decisions. Defaults to :class:`DefaultRetryStrategy`
            over *calculator*.
        observer: Optional sink notified before each retry.
        calculator: Delay calculator shared across calls. Built from *policy*
            when omitted.
    """

    kind: ClassVar[str] = "request"
    request_base: ClassVar[type[Request[Any]]] = Request

    def __init__(
        self,
        resolver: HandlerResolver,
        policy: BackoffPolicy | None = None,
        *,
        strategy: RetryStrategy | None = None,
        observer: RetryObserver | None = None,
        calculator: BackoffCalculator | None = None,
    ) -> None:
        self._resolver = resolver
        self._policy = policy if policy is not None else BackoffPolicy()
        self._calculator = calculator or BackoffCalculator(self._policy)
        self._strategy = strategy or DefaultRetryStrategy(self._calculator)
        self._observer = observer

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    async def execute(
        self,
        request: Request[ResultT],
        cancellation: CancellationToken | None = None,
    ) -> ResultT:
        """Run *request* through its handler, retrying per the policy.

        Raises:
            ConfigurationError: the policy is invalid (no attempt is made).
            ResolutionError: zero or several handlers are registered.
            InvocationContractError: the handler has no ``handle`` method.
            RetryDelayError: the strategy computed a negative delay.
            RetryExhaustedError: retry limits were reached; ``__cause__`` is
                the last handler error.
            DispatchCancelledError: *cancellation* fired before an attempt or
                during a wait.
            Exception: a handler error that ``should_retry`` declined, as is.
        """
        if not isinstance(request, self.request_base):
            msg = (
                f"{type(self).__name__} cannot dispatch {type_name(type(request))}: "
                f"expected a {self.request_base.__name__}."
            )
            raise TypeError(msg)

        ensure_valid(self._policy)

        request_type = type(request)
        binding = self._resolver.resolve(request_type, request_type.result_type, kind=self.kind)
        handle = binding.bind()
        token = cancellation if cancellation is not None else CancellationToken()

        attempt = 0
        last_error: Exception | None = None
        while True:
            if token.is_cancelled:
                raise DispatchCancelledError(request_type, attempt) from last_error
            attempt += 1
            try:
                return await binding.invoke(handle, request, token)
            except Exception as exc:
                if not self._strategy.should_retry(request, exc):
                    raise
                last_error = exc

                delay = self._strategy.delay_milliseconds(request, exc, attempt)
                if delay < 0:
                    raise RetryDelayError(delay) from exc

                if retry_limit_reached(self._policy, attempt, delay):
                    break

                self._notify(request_type, attempt, delay, exc)

                if await token.sleep(delay / 1000):
                    raise DispatchCancelledError(request_type, attempt) from exc

        logger.debug("Giving up on %s after %d attempts", type_name(request_type), attempt)
        raise RetryExhaustedError(request_type, attempt, kind=self.kind) from last_error

    async def try_execute(
        self,
        request: Request[Any],
        cancellation: CancellationToken | None = None,
    ) -> DispatchResult:
        """Like :meth:`execute`, but report failures in a DispatchResult.

        ``asyncio.CancelledError`` is not an ``Exception`` and still propagates.
        """
        op = type_name(type(request))
        try:
            value = await self.execute(request, cancellation)
        except Exception as exc:
            return DispatchResult(ok=False, op=op, error=DispatchFailure.from_exception(exc))
        return DispatchResult(ok=True, op=op, value=value)

    def execute_sync(
        self,
        request: Request[ResultT],
        cancellation: CancellationToken | None = None,
    ) -> ResultT:
        """Blocking :meth:`execute` for callers without a running event loop."""
        return asyncio.run(self.execute(request, cancellation))

    def _notify(self, request_type: type, attempt: int, delay: int, error: Exception) -> None:
        """Report a scheduled retry. Observer failures never affect dispatch."""
        observer = self._observer
        if observer is None:
            return
        try:
            if observer.is_warning_enabled():
                observer.log_retry_warning(request_type, attempt, delay, error)
        except Exception:
            logger.debug("Retry observer failed for %s", type_name(request_type), exc_info=True)


class CommandBus(Dispatcher[Command[Any]]):
    """Dispatcher for state-changing requests."""

    kind = RequestKind.COMMAND
    request_base = Command


class QueryBus(Dispatcher[Query[Any]]):
    """Dispatcher for read-only requests."""

    kind = RequestKind.QUERY
    request_base = Query
