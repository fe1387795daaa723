"""Command: validate the configured backoff policy."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from cqbus.commands._context import AppContext


@click.command()
@click.pass_obj
def check(app: AppContext) -> None:
    """Check the [retry] policy for conflicting settings."""
    from cqbus.output.report import Report
    from cqbus.services.backoff import validate

    policy = app.settings.retry
    violations = validate(policy)
    data = {
        "config_path": str(app.settings.config_path) if app.settings.config_path else None,
        "policy": policy.model_dump(mode="json"),
        "violations": violations,
    }
    app.emit(Report(ok=not violations, op="check", data=data))
