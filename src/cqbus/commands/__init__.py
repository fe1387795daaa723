"""Subcommand modules for cqbus.

Provides register_commands() which uses deferred imports to keep
``cqbus --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from cqbus.commands.check import check
    from cqbus.commands.handlers import handlers
    from cqbus.commands.schedule import schedule

    cli.add_command(check)
    cli.add_command(schedule)
    cli.add_command(handlers)
