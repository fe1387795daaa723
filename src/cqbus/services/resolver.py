"""HandlerResolver — exactly-one handler lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cqbus.domain.errors import ResolutionError

if TYPE_CHECKING:
    from cqbus.infrastructure.registry import HandlerBinding, HandlerRegistry


class HandlerResolver:
    """Find the single handler registered for a request type.

    Missing or ambiguous registrations are fatal: retrying would find the
    same registry contents again.
    """

    def __init__(self, registry: HandlerRegistry) -> None:
        self._registry = registry

    def resolve(self, request_type: type, result_type: Any, *, kind: str = "request") -> HandlerBinding:
        bindings = self._registry.lookup_all(request_type, result_type)
        if len(bindings) != 1:
            raise ResolutionError(request_type, len(bindings), kind=kind)
        return bindings[0]
