"""Tests for promo.output.console module."""

from __future__ import annotations

import pytest

from promo.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.STEP) == "step"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM", "HEADER", "STEP"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("failed")
        console.warning("careful")
        console.info("fyi")
        assert console.messages == ["OK done", "error: failed", "warning: careful", "info: fyi"]

    def test_step(self) -> None:
        console = MockConsole()
        console.step(2, 9, "merge release/1.2.3 into master (--no-ff)")
        assert console.outputs[0].message == "[2/9] merge release/1.2.3 into master (--no-ff)"
        assert console.outputs[0].style == Style.STEP

    def test_helpers(self) -> None:
        console = MockConsole()
        console.header("Promoting release/1.2.3")
        console.warning("started notification not delivered")
        console.warning("succeeded notification not delivered")

        assert console.has_warning() is True
        assert console.has_error() is False
        assert console.count(Style.WARNING) == 2
        assert len(console.find("notification")) == 2
        assert console.text.startswith("Promoting release/1.2.3\n")

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("typed")


class TestRichConsole:
    def test_writes_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.success("promoted")
        console.step(1, 9, "checkout release/1.2.3")

        out = capsys.readouterr().out
        assert "OK promoted" in out
        assert "[1/9] checkout release/1.2.3" in out

    def test_writes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole(stderr=True).error("push rejected")

        captured = capsys.readouterr()
        assert "error: push rejected" in captured.err
        assert captured.out == ""

    def test_brackets_in_messages_are_printed_verbatim(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        console = RichConsole()
        console.print("[notify] Promotion started: Promoting release/1.2.3", Style.INFO)
        console.error("push-production: ! [rejected]  master -> master (fetch first)")
        console.step(6, 9, "push [master]")

        out = capsys.readouterr().out
        assert "[notify] Promotion started" in out
        assert "! [rejected]  master -> master" in out
        assert "[6/9] push [master]" in out

    def test_closing_tag_in_tool_output_does_not_raise(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        console = RichConsole()
        console.error("changelog: changelog tool failed: [/oops] bad")
        console.warning("failed notification not delivered: [/x]")

        out = capsys.readouterr().out
        assert "error: changelog: changelog tool failed: [/oops] bad" in out
        assert "[/x]" in out
