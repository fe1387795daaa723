"""Rich Console factory and theme for cqbus CLI output.

Creates Console instances that render to a StringIO buffer so renderers
return strings.  In non-TTY environments (tests, pipes) Rich automatically
disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CQBUS_THEME = Theme(
    {
        "cqbus.ok": "bold green",
        "cqbus.error": "bold red",
        "cqbus.warning": "bold yellow",
        "cqbus.op": "bold cyan",
        "cqbus.key": "dim",
        "cqbus.delay": "magenta",
        "cqbus.type": "bold blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=CQBUS_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
