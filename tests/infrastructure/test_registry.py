"""Tests for HandlerRegistry and HandlerBinding."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from cqbus.domain.errors import InvocationContractError
from cqbus.infrastructure.registry import FunctionHandler, HandlerBinding, HandlerRegistry
from cqbus.services.cancellation import CancellationToken
from tests.conftest import CountItems, EchoHandler, Ping, Touch


class TestRegister:
    def test_default_result_type_comes_from_request(self, registry: HandlerRegistry) -> None:
        binding = registry.register(Ping, EchoHandler())
        assert binding.result_type is str
        assert registry.lookup_all(Ping, str) == [binding]

    def test_explicit_result_type(self, registry: HandlerRegistry) -> None:
        registry.register(Ping, EchoHandler(), result_type=bytes)
        assert registry.lookup_all(Ping, str) == []
        assert len(registry.lookup_all(Ping, bytes)) == 1

    def test_duplicates_are_kept_in_order(self, registry: HandlerRegistry) -> None:
        first, second = EchoHandler(), EchoHandler()
        registry.register(Ping, first)
        registry.register(Ping, second)
        assert [b.handler for b in registry.lookup_all(Ping, str)] == [first, second]

    def test_function_is_wrapped(self, registry: HandlerRegistry) -> None:
        def count_items(query: CountItems, cancellation: Any) -> int:
            return 3

        binding = registry.register(CountItems, count_items)
        assert isinstance(binding.handler, FunctionHandler)
        assert binding.handler_name == "count_items"

    def test_handler_name_uses_class(self, registry: HandlerRegistry) -> None:
        binding = registry.register(Ping, EchoHandler())
        assert binding.handler_name == "tests.conftest.EchoHandler"

    def test_lookup_returns_snapshot(self, registry: HandlerRegistry) -> None:
        registry.register(Ping, EchoHandler())
        snapshot = registry.lookup_all(Ping, str)
        registry.register(Ping, EchoHandler())
        assert len(snapshot) == 1

    def test_iter_and_len(self, registry: HandlerRegistry) -> None:
        registry.register(Ping, EchoHandler())
        registry.register(CountItems, lambda q, c: 1)
        assert len(registry) == 2
        assert {b.request_type for b in registry} == {Ping, CountItems}

    def test_concurrent_registration(self, registry: HandlerRegistry) -> None:
        def register_many() -> None:
            for _ in range(100):
                registry.register(Ping, EchoHandler())

        threads = [threading.Thread(target=register_many) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(registry.lookup_all(Ping, str)) == 400


class TestHandlesDecorator:
    def test_class_is_instantiated(self, registry: HandlerRegistry) -> None:
        @registry.handles(Ping)
        class PingHandler:
            def handle(self, command: Ping, cancellation: Any) -> str:
                return "pong"

        (binding,) = registry.lookup_all(Ping, str)
        assert isinstance(binding.handler, PingHandler)

    def test_function_is_returned_unchanged(self, registry: HandlerRegistry) -> None:
        @registry.handles(Touch)
        def touch(command: Touch, cancellation: Any) -> None:
            return None

        assert callable(touch)
        assert touch.__name__ == "touch"
        assert len(registry) == 1


class TestHandlerBinding:
    def test_bind_missing_handle(self) -> None:
        binding = HandlerBinding(request_type=Ping, result_type=str, handler=object())
        with pytest.raises(InvocationContractError, match="must define a 'handle' method"):
            binding.bind()

    @pytest.mark.asyncio
    async def test_invoke_sync_handler(self) -> None:
        binding = HandlerBinding(request_type=Ping, result_type=str, handler=EchoHandler())
        value = await binding.invoke(binding.bind(), Ping("hi"), CancellationToken())
        assert value == "hi"

    @pytest.mark.asyncio
    async def test_invoke_coroutine_handler(self) -> None:
        class AsyncCount:
            async def handle(self, query: CountItems, cancellation: Any) -> int:
                return 9

        binding = HandlerBinding(request_type=CountItems, result_type=int, handler=AsyncCount())
        assert await binding.invoke(binding.bind(), CountItems(), CancellationToken()) == 9

    @pytest.mark.asyncio
    async def test_result_type_mismatch(self) -> None:
        binding = HandlerBinding(request_type=CountItems, result_type=int, handler=EchoHandler())
        with pytest.raises(InvocationContractError, match="must return int, got str"):
            await binding.invoke(binding.bind(), Ping("x"), CancellationToken())

    @pytest.mark.asyncio
    async def test_generic_result_type_is_not_checked(self) -> None:
        binding = HandlerBinding(request_type=Ping, result_type=list[int], handler=EchoHandler())
        assert await binding.invoke(binding.bind(), Ping("x"), CancellationToken()) == "x"

    @pytest.mark.asyncio
    async def test_int_satisfies_float_result(self) -> None:
        class Average:
            def handle(self, query: Any, cancellation: Any) -> int:
                return 3

        binding = HandlerBinding(request_type=CountItems, result_type=float, handler=Average())
        assert await binding.invoke(binding.bind(), CountItems(), CancellationToken()) == 3

    @pytest.mark.asyncio
    async def test_float_does_not_satisfy_int_result(self) -> None:
        class Average:
            def handle(self, query: Any, cancellation: Any) -> float:
                return 3.0

        binding = HandlerBinding(request_type=CountItems, result_type=int, handler=Average())
        with pytest.raises(InvocationContractError, match="must return int, got float"):
            await binding.invoke(binding.bind(), CountItems(), CancellationToken())
