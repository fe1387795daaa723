"""Handler registry keyed by ``(request type, result type)``.

Handlers are registered at startup, either directly, through the
``handles`` decorator, or by plugins. Several handlers may be registered
for the same key; deciding that exactly one is required is the resolver's
job, not the registry's.

Registration takes a lock; lookups return a snapshot list.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

from cqbus.domain.errors import InvocationContractError
from cqbus.domain.requests import Request, type_name

logger = logging.getLogger(__name__)

HandlerT = TypeVar("HandlerT")

HandleFn = Callable[[Any, Any], Any]

# int is acceptable where float is declared, and both where complex is.
_NUMERIC_WIDENING: dict[type, tuple[type, ...]] = {
    float: (int, float),
    complex: (int, float, complex),
}


class FunctionHandler:
    """Adapts a plain ``fn(request, cancellation)`` callable to the handler contract."""

    def __init__(self, fn: Callable[..., Any]) -> None:
        self._fn = fn
        self.__name__ = getattr(fn, "__name__", type(fn).__name__)

    def handle(self, request: Any, cancellation: Any) -> Any:
        return self._fn(request, cancellation)

    def __repr__(self) -> str:
        return f"FunctionHandler({self.__name__})"


@dataclass(frozen=True)
class HandlerBinding:
    """A handler registered for one request type and the result it must produce."""

    request_type: type
    result_type: Any
    handler: object

    @property
    def handler_name(self) -> str:
        if isinstance(self.handler, FunctionHandler):
            return self.handler.__name__
        return type_name(type(self.handler))

    def bind(self) -> HandleFn:
        """Return the handler's ``handle`` method.

        Raises InvocationContractError when the handler has none.
        """
        handle = getattr(self.handler, "handle", None)
        if not callable(handle):
            raise InvocationContractError(
                f"The handler {self.handler_name} must define a 'handle' method.",
                handler=self.handler,
            )
        return handle

    async def invoke(self, handle: HandleFn, request: Any, cancellation: Any) -> Any:
        """Call *handle*, await its value when needed, and check the result type."""
        value = handle(request, cancellation)
        if inspect.isawaitable(value):
            value = await value
        self._check_result(value)
        return value

    def _check_result(self, value: Any) -> None:
        """Reject a value that is not an instance of a plain-class result type.

        Generic aliases such as ``list[int]`` are not checked. Numeric results
        follow the usual promotions: an ``int`` satisfies ``float``.
        """
        expected = self.result_type
        if expected is object or not isinstance(expected, type):
            return
        if not isinstance(value, _NUMERIC_WIDENING.get(expected, expected)):
            raise InvocationContractError(
                f"The handler {self.handler_name} 'handle' method must return "
                f"{type_name(expected)}, got {type_name(type(value))}.",
                handler=self.handler,
            )


class HandlerRegistry:
    """Startup-populated map of handler bindings."""

    def __init__(self) -> None:
        self._bindings: defaultdict[tuple[type, Any], list[HandlerBinding]] = defaultdict(list)
        self._lock = threading.Lock()

    def register(
        self,
        request_type: type[Request[Any]],
        handler: object,
        *,
        result_type: Any = None,
    ) -> HandlerBinding:
        """Register *handler* for *request_type*.

        *result_type* defaults to the result type the request declares.
        Objects without a ``handle`` method that are callable are wrapped in
        a :class:`FunctionHandler`; anything else is stored as given and
        rejected when a dispatcher tries to call it.
        """
        if result_type is None:
            result_type = getattr(request_type, "result_type", object)
        if not hasattr(handler, "handle") and callable(handler) and not inspect.isclass(handler):
            handler = FunctionHandler(handler)
        binding = HandlerBinding(request_type=request_type, result_type=result_type, handler=handler)
        with self._lock:
            self._bindings[(request_type, result_type)].append(binding)
        logger.debug("Registered handler %s for %s", binding.handler_name, type_name(request_type))
        return binding

    def handles(
        self, request_type: type[Request[Any]], *, result_type: Any = None
    ) -> Callable[[HandlerT], HandlerT]:
        """Decorator form of :meth:`register`.

        Decorated classes are instantiated without arguments; decorated
        functions are wrapped. The decorated object is returned unchanged.
        """

        def decorator(target: HandlerT) -> HandlerT:
            handler = target() if inspect.isclass(target) else target
            self.register(request_type, handler, result_type=result_type)
            return target

        return decorator

    def lookup_all(self, request_type: type, result_type: Any) -> list[HandlerBinding]:
        """Every binding registered for exactly this pair, in registration order."""
        with self._lock:
            return list(self._bindings.get((request_type, result_type), ()))

    def __iter__(self) -> Iterator[HandlerBinding]:
        with self._lock:
            snapshot = [b for bindings in self._bindings.values() for b in bindings]
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(bindings) for bindings in self._bindings.values())
