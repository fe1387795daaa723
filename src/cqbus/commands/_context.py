"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides centralized report emission (stdout/stderr
routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from cqbus.output.renderers import render_json, render_report

if TYPE_CHECKING:
    from cqbus.config.settings import CqbusSettings
    from cqbus.output.report import Report


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: CqbusSettings) -> None:
        self.settings = settings

        from cqbus.config.logging import configure_from

        configure_from(settings.logging)

    def emit(self, report: Report) -> None:
        """Format and output a report with correct exit semantics.

        * Success: writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        if self.settings.json_output:
            output = render_json(report)
        else:
            output = render_report(report)
        if report.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
