"""Wire settings, registry, plugins and both buses together.

Usage::

    registry = HandlerRegistry()
    registry.register(RenameUser, RenameUserHandler())
    buses = add_cqrs(registry=registry)
    user = await buses.commands.execute(RenameUser(...))
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cqbus.config.settings import CqbusSettings
from cqbus.infrastructure.registry import HandlerRegistry
from cqbus.plugins.manager import PluginManager
from cqbus.services.backoff import BackoffCalculator
from cqbus.services.dispatcher import CommandBus, QueryBus
from cqbus.services.observer import StructlogRetryObserver
from cqbus.services.resolver import HandlerResolver

if TYPE_CHECKING:
    from cqbus.services.dispatcher import RetryStrategy
    from cqbus.services.observer import RetryObserver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Buses:
    """The pair of dispatchers sharing one registry and one backoff policy."""

    commands: CommandBus
    queries: QueryBus
    registry: HandlerRegistry


def add_cqrs(
    settings: CqbusSettings | None = None,
    *,
    registry: HandlerRegistry | None = None,
    plugin_manager: PluginManager | None = None,
    observer: RetryObserver | None = None,
    strategy: RetryStrategy | None = None,
    rng: random.Random | None = None,
) -> Buses:
    """Build the command and query buses.

    Args:
        settings: Source of the backoff policy and plugin switches. Loaded
            from the environment and ``cqbus.toml`` when omitted.
        registry: Pre-populated handler registry; a new one otherwise.
        plugin_manager: Plugin manager to collect handlers from. When omitted
            and plugins are enabled, entry points are discovered.
        observer: Retry event sink; structlog warnings by default.
        strategy: Retry strategy override shared by both buses.
        rng: Randomness source for the Random algorithm.
    """
    if settings is None:
        settings = CqbusSettings.load()
    if registry is None:
        registry = HandlerRegistry()

    if settings.plugins.enabled:
        if plugin_manager is None:
            plugin_manager = PluginManager()
            plugin_manager.discover_and_load(settings.plugins.entry_point_group)
        failed = plugin_manager.register_handlers(registry)
        if failed:
            logger.warning("Handler plugins failed to load: %s", ", ".join(failed))

    policy = settings.retry
    calculator = BackoffCalculator(policy, rng=rng)
    resolver = HandlerResolver(registry)
    if observer is None:
        observer = StructlogRetryObserver()

    commands = CommandBus(
        resolver, policy, strategy=strategy, observer=observer, calculator=calculator
    )
    queries = QueryBus(resolver, policy, strategy=strategy, observer=observer, calculator=calculator)
    return Buses(commands=commands, queries=queries, registry=registry)
