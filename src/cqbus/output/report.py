"""Report — the envelope every CLI command emits.

INVARIANT: Commands hand AppContext.emit a Report; renderers never see raw dicts
without their ``ok``/``op`` framing.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Report(BaseModel):
    """Outcome of one CLI command.

    Attributes:
        ok: Whether the command succeeded; failures exit with code 1.
        op: Command name, used to pick a renderer.
        data: Command-specific payload.
    """

    model_config = {"frozen": True}

    ok: bool = True
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
