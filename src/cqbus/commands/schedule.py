"""Command: preview retry delays for the configured policy."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from cqbus.commands._context import AppContext


@click.command()
@click.option(
    "-n",
    "--attempts",
    type=click.IntRange(min=1),
    default=10,
    show_default=True,
    help="Failed attempts to simulate.",
)
@click.option("--seed", type=int, default=None, help="Seed for the Random algorithm.")
@click.pass_obj
def schedule(app: AppContext, attempts: int, seed: int | None) -> None:
    """Show the wait after each failed attempt and where retrying stops."""
    from cqbus.output.report import Report
    from cqbus.services.backoff import BackoffCalculator, validate

    policy = app.settings.retry
    violations = validate(policy)
    if violations:
        app.emit(Report(ok=False, op="schedule", data={"violations": violations}))
        return

    rng = random.Random(seed) if seed is not None else None
    steps = BackoffCalculator(policy, rng=rng).schedule(attempts)
    data = {
        "algorithm": policy.algorithm_name,
        "steps": [
            {"attempt": s.attempt, "delay_ms": s.delay_ms, "retry": s.retry} for s in steps
        ],
        "truncated": bool(steps) and steps[-1].retry,
    }
    app.emit(Report(op="schedule", data=data))
