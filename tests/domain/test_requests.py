"""Tests for Command/Query base classes and result type capture."""

from __future__ import annotations

from typing import TypeVar

from cqbus.domain.requests import Command, Query, Request, RequestKind, type_name
from tests.conftest import CountItems, Ping, Touch

T = TypeVar("T")


class TestResultType:
    def test_command_result_type(self) -> None:
        assert Ping.result_type is str
        assert Ping.kind is RequestKind.COMMAND

    def test_query_result_type(self) -> None:
        assert CountItems.result_type is int
        assert CountItems.kind is RequestKind.QUERY

    def test_none_result(self) -> None:
        assert Touch.result_type is type(None)

    def test_unparameterized_defaults_to_object(self) -> None:
        class Bare(Command):  # type: ignore[type-arg]
            pass

        assert Bare.result_type is object

    def test_inherited_from_ancestor(self) -> None:
        class LoudPing(Ping):
            pass

        assert LoudPing.result_type is str

    def test_generic_intermediate(self) -> None:
        class Paged(Query[T]):
            pass

        class ListNames(Paged[list[str]]):
            pass

        assert Paged.result_type is object
        assert ListNames.result_type == list[str]

    def test_request_kinds_are_distinct(self) -> None:
        assert issubclass(Ping, Request)
        assert not issubclass(Ping, Query)


class TestTypeName:
    def test_qualified(self) -> None:
        assert type_name(Ping) == "tests.conftest.Ping"

    def test_builtin(self) -> None:
        assert type_name(int) == "int"

    def test_nested(self) -> None:
        class Inner:
            pass

        assert type_name(Inner).endswith("TestTypeName.test_nested.<locals>.Inner")
