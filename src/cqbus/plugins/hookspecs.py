"""Pluggy hook specifications for cqbus.

Plugins contribute handlers at startup; dispatch itself never goes through
pluggy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from cqbus.infrastructure.registry import HandlerRegistry

hookspec = pluggy.HookspecMarker("cqbus")
hookimpl = pluggy.HookimplMarker("cqbus")


class CqbusHookSpec:
    """Hook specifications for the cqbus plugin system."""

    @hookspec
    def cqbus_register_handlers(self, registry: HandlerRegistry) -> None:
        """Register command and query handlers on *registry*."""
