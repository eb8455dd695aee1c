"""Tests for libroll.output.console module."""

from __future__ import annotations

import pytest

from libroll.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    """Test Style enum."""

    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.WARNING) == "warning"
        assert str(Style.DIM) == "dim"


class TestMockConsole:
    """Test MockConsole capture and helpers."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("git fetch origin", Style.DIM)
        assert console.outputs == [OutputRecord("git fetch origin", Style.DIM)]

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("Changes saved to branch: x")
        console.error("git push failed")
        console.warning("Branch release does not exist in remote")
        console.info("Processing service: orders on branch: develop")
        assert console.messages == [
            "OK Changes saved to branch: x",
            "error: git push failed",
            "warning: Branch release does not exist in remote",
            "info: Processing service: orders on branch: develop",
        ]

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("orders")
        console.newline()
        assert console.outputs[0].style == Style.HEADER
        assert console.outputs[1].message == ""

    def test_helpers(self) -> None:
        console = MockConsole()
        console.warning("one")
        console.warning("two")
        console.info("three")

        assert console.has_warning() is True
        assert console.has_error() is False
        assert console.count(Style.WARNING) == 2
        assert [o.message for o in console.find("t")] == ["warning: two", "info: three"]
        assert console.text == "warning: one\nwarning: two\ninfo: three"

        console.clear()
        assert console.outputs == []

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("ok")


class TestRichConsole:
    """Test RichConsole writes to the terminal without interpreting markup."""

    def test_brackets_are_printed_literally(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.error("[red]not markup[/red]")
        console.print("[bold]plain[/bold]", Style.DIM)

        out = capsys.readouterr().out
        assert "[red]not markup[/red]" in out
        assert "[bold]plain[/bold]" in out
        assert "error:" in out
