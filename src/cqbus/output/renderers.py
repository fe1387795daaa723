"""Operation-specific Rich renderers for CLI reports.

Each renderer writes to a Rich Console (backed by StringIO); the public
:func:`render_report` picks one by the report's ``op`` and returns the rendered text.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from cqbus.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from cqbus.output.report import Report


def render_report(report: Report) -> str:
    """Render a command report to plain or styled text."""
    console = create_console()
    _status_line(console, report.op, ok=report.ok)
    renderer = _OP_RENDERERS.get(report.op, _render_generic)
    renderer(report.data, console)
    return get_output(console).rstrip("\n")


def render_json(report: Report) -> str:
    return report.model_dump_json(indent=2)


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, op: str, *, ok: bool) -> None:
    label = Text("OK", style="cqbus.ok") if ok else Text("ERROR", style="cqbus.error")
    console.print(label, Text(f"  {op}", style="cqbus.op"))


def _render_violations(console: Console, violations: list[str]) -> None:
    for violation in violations:
        console.print(Text(f"  - {violation}", style="cqbus.error"))


def _render_policy(console: Console, policy: dict[str, Any]) -> None:
    for key, value in policy.items():
        console.print(Text(f"  {key}: ", style="cqbus.key"), Text(str(value)), sep="")


# ── Renderers ─────────────────────────────────────────────────────────


def _render_generic(data: dict[str, Any], console: Console) -> None:
    for key, value in data.items():
        console.print(Text(f"  {key}: ", style="cqbus.key"), Text(str(value)), sep="")


def _render_check(data: dict[str, Any], console: Console) -> None:
    _render_policy(console, data.get("policy", {}))
    _render_violations(console, data.get("violations", []))


def _render_schedule(data: dict[str, Any], console: Console) -> None:
    violations = data.get("violations", [])
    if violations:
        _render_violations(console, violations)
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Attempt", justify="right")
    table.add_column("Delay (ms)", justify="right", style="cqbus.delay")
    table.add_column("Decision")
    for step in data.get("steps", []):
        decision = "retry" if step["retry"] else "give up"
        table.add_row(str(step["attempt"]), str(step["delay_ms"]), decision)
    console.print(table)

    if data.get("truncated"):
        console.print(Text("  (still retrying after the last attempt shown)", style="cqbus.warning"))


def _render_handlers(data: dict[str, Any], console: Console) -> None:
    handlers = data.get("handlers", [])
    if handlers:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Kind")
        table.add_column("Request", style="cqbus.type")
        table.add_column("Result")
        table.add_column("Handler")
        for row in handlers:
            table.add_row(row["kind"], row["request_type"], row["result_type"], row["handler"])
        console.print(table)
    else:
        console.print(Text("  no handlers registered", style="cqbus.key"))

    for name in data.get("failed_plugins", []):
        console.print(Text(f"  plugin failed: {name}", style="cqbus.warning"))


_OP_RENDERERS: dict[str, Callable[[dict[str, Any], Console], None]] = {
    "check": _render_check,
    "schedule": _render_schedule,
    "handlers": _render_handlers,
}
