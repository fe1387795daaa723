"""Request base classes for commands and queries.

A request declares the type of result it expects through its generic base::

    class RenameUser(Command[User]):
        ...

The result type is captured once, when the subclass is defined, so the
dispatcher never inspects generics at call time.
"""

from __future__ import annotations

import typing
from enum import StrEnum
from typing import Any, ClassVar, Generic, TypeVar

R = TypeVar("R")


class RequestKind(StrEnum):
    """The two request families; dispatch semantics are identical."""

    COMMAND = "command"
    QUERY = "query"


def type_name(cls: type) -> str:
    """Qualified name used in error messages and log events."""
    module = getattr(cls, "__module__", None)
    qualname = getattr(cls, "__qualname__", repr(cls))
    if not module or module == "builtins":
        return qualname
    return f"{module}.{qualname}"


def _declared_result_type(cls: type, base: type) -> Any:
    """Find ``T`` in ``base[T]`` among the original bases of *cls* and its ancestors."""
    for klass in cls.__mro__:
        for orig in klass.__dict__.get("__orig_bases__", ()):
            origin = typing.get_origin(orig)
            if isinstance(origin, type) and issubclass(origin, base):
                args = typing.get_args(orig)
                if args and not isinstance(args[0], TypeVar):
                    return args[0]
    return object


class Request(Generic[R]):
    """Common ancestor of :class:`Command` and :class:`Query`."""

    kind: ClassVar[RequestKind]
    result_type: ClassVar[Any] = object

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.result_type = _declared_result_type(cls, Request)


class Command(Request[R]):
    """A request expected to mutate state."""

    kind = RequestKind.COMMAND


class Query(Request[R]):
    """A request expected only to read state."""

    kind = RequestKind.QUERY
