"""Tests for ascnext.output.console module."""

from __future__ import annotations

import pytest

from ascnext.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DEBUG) == "debug"


class TestMockConsole:
    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("bad")
        console.warning("careful")
        console.info("fyi")
        console.debug("details")
        assert console.messages == [
            "OK done",
            "error: bad",
            "warning: careful",
            "info: fyi",
            "debug: details",
        ]

    def test_helpers(self) -> None:
        console = MockConsole()
        console.header("Summary")
        console.warning("one")
        console.warning("two")
        assert console.has_warning()
        assert not console.has_error()
        assert console.count(Style.WARNING) == 2
        assert [o.message for o in console.find("two")] == ["warning: two"]
        assert console.text.startswith("Summary")

        console.clear()
        assert console.outputs == []

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.newline()


class TestRichConsole:
    def test_writes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.info("hello [not markup]")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "hello [not markup]" in captured.err

    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().debug("quiet")
        assert "quiet" not in capsys.readouterr().err

        RichConsole(verbose=True).debug("loud")
        assert "debug: loud" in capsys.readouterr().err
