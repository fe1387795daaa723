"""Command: list handlers contributed by installed plugins."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from cqbus.commands._context import AppContext


@click.command()
@click.pass_obj
def handlers(app: AppContext) -> None:
    """List handlers registered through the plugin entry point group."""
    from cqbus.domain.requests import type_name
    from cqbus.infrastructure.registry import HandlerRegistry
    from cqbus.output.report import Report
    from cqbus.plugins.manager import PluginManager

    plugins = app.settings.plugins
    registry = HandlerRegistry()
    failed: list[str] = []
    if plugins.enabled:
        pm = PluginManager()
        pm.discover_and_load(plugins.entry_point_group)
        failed = pm.register_handlers(registry)

    rows = [
        {
            "kind": str(getattr(binding.request_type, "kind", "request")),
            "request_type": type_name(binding.request_type),
            "result_type": (
                type_name(binding.result_type)
                if isinstance(binding.result_type, type)
                else repr(binding.result_type)
            ),
            "handler": binding.handler_name,
        }
        for binding in registry
    ]
    rows.sort(key=lambda row: (row["kind"], row["request_type"]))
    app.emit(Report(op="handlers", data={"handlers": rows, "failed_plugins": failed}))
