"""Tests for CLI report renderers and the console factory."""

from __future__ import annotations

import json
from io import StringIO

import pytest
from pydantic import ValidationError

from cqbus.output.console import create_console, get_output
from cqbus.output.renderers import render_json, render_report
from cqbus.output.report import Report


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        assert isinstance(create_console().file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[bold red]hello[/bold red]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "hello" in output

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80


class TestReport:
    def test_defaults(self) -> None:
        report = Report(op="check")
        assert report.ok is True
        assert report.data == {}

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            Report(op="check").ok = False  # type: ignore[misc]


class TestRenderReport:
    def test_status_line(self) -> None:
        assert render_report(Report(op="check")).splitlines()[0].startswith("OK")
        assert render_report(Report(ok=False, op="check")).splitlines()[0].startswith("ERROR")

    def test_check_lists_violations(self) -> None:
        output = render_report(
            Report(
                ok=False,
                op="check",
                data={"policy": {"delay": -1}, "violations": ["'delay' must be greater than 0."]},
            )
        )
        assert "  delay: -1\n" in output
        assert "- 'delay' must be greater than 0." in output

    def test_schedule_table(self) -> None:
        data = {
            "algorithm": "Fixed",
            "steps": [
                {"attempt": 1, "delay_ms": 10, "retry": True},
                {"attempt": 2, "delay_ms": 10, "retry": False},
            ],
            "truncated": False,
        }
        output = render_report(Report(op="schedule", data=data))
        assert "Attempt" in output
        assert "retry" in output
        assert "give up" in output
        assert "still retrying" not in output

    def test_schedule_truncated(self) -> None:
        data = {"steps": [{"attempt": 1, "delay_ms": 10, "retry": True}], "truncated": True}
        assert "still retrying" in render_report(Report(op="schedule", data=data))

    def test_unknown_op_uses_generic(self) -> None:
        output = render_report(Report(op="other", data={"answer": 42}))
        assert output.splitlines()[1] == "  answer: 42"


class TestRenderJson:
    def test_envelope(self) -> None:
        payload = json.loads(render_json(Report(op="check", data={"violations": []})))
        assert payload == {"ok": True, "op": "check", "data": {"violations": []}}

    def test_failure_envelope(self) -> None:
        payload = json.loads(render_json(Report(ok=False, op="schedule", data={"violations": ["x"]})))
        assert payload["ok"] is False
        assert payload["data"]["violations"] == ["x"]
