"""Plugin discovery and handler collection.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus plugin objects registered directly by the host application.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING

import pluggy

from cqbus.plugins.hookspecs import CqbusHookSpec

if TYPE_CHECKING:
    from cqbus.infrastructure.registry import HandlerRegistry

PROJECT_NAME = "cqbus"
DEFAULT_ENTRY_POINT_GROUP = "cqbus.handlers"
HOOK_NAME = "cqbus_register_handlers"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery and the handler registration hook."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(CqbusHookSpec)

    def discover_and_load(self, group: str = DEFAULT_ENTRY_POINT_GROUP) -> list[str]:
        """Load plugins advertised under the *group* entry point.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints(group)
        self._normalize_plugin_instances()
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def register_handlers(self, registry: HandlerRegistry) -> list[str]:
        """Let every plugin add its handlers to *registry*.

        Each plugin is called on its own so one broken plugin does not keep
        the others from registering. Returns the names of plugins that failed.
        """
        failed: list[str] = []
        for plugin in self._pm.get_plugins():
            hook = getattr(plugin, HOOK_NAME, None)
            if hook is None:
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__class__.__name__
            try:
                hook(registry=registry)
            except Exception:
                logger.warning(
                    "Failed to register handlers from plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                failed.append(plugin_name)
        return failed

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not callable(getattr(plugin, HOOK_NAME, None)):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)
