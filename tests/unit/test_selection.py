"""Unit tests for selection capture."""

import logging

import pytest

from conftest import FakeRunner, tool_error
from rabbithole.core.models import SelectionCandidate, SelectionSource
from rabbithole.core.selection import SelectionResolver
from rabbithole.errors import (
    ManualOnly,
    NoSelectionAvailable,
    SelectionEmpty,
    SelectionReadFailed,
    SelectionUnavailable,
)

PRIMARY = ["xsel", "--output", "--primary"]
CLIPBOARD = ["xsel", "--output", "--clipboard"]


class TestAutoPolicy:
    """auto tries PRIMARY, then CLIPBOARD."""

    def test_primary_wins(self):
        runner = FakeRunner().on(PRIMARY, "  rust lifetimes \n").on(CLIPBOARD, "other")
        candidate = SelectionResolver(runner).capture("auto")

        assert candidate == SelectionCandidate("rust lifetimes", SelectionSource.PRIMARY)
        assert runner.calls == [PRIMARY]

    def test_whitespace_primary_falls_back_to_clipboard(self):
        runner = FakeRunner().on(PRIMARY, "   \n\t").on(CLIPBOARD, "foo")
        candidate = SelectionResolver(runner).capture("auto")

        assert candidate.text == "foo"
        assert candidate.source is SelectionSource.CLIPBOARD

    def test_failed_primary_falls_back_to_clipboard(self):
        runner = FakeRunner().on(PRIMARY, tool_error("xsel", "timed out")).on(CLIPBOARD, "foo")
        assert SelectionResolver(runner).capture("auto").source is SelectionSource.CLIPBOARD

    def test_both_empty(self):
        runner = FakeRunner().on(PRIMARY, "").on(CLIPBOARD, " ")
        with pytest.raises(NoSelectionAvailable):
            SelectionResolver(runner).capture("auto")

    def test_per_read_timeout(self):
        runner = FakeRunner().on(PRIMARY, "x")
        SelectionResolver(runner, timeout=0.25).capture("auto")
        assert runner.timeouts == [0.25]


class TestExplicitPolicies:
    """primary, clipboard and manual never fall back."""

    def test_manual_reads_nothing(self):
        runner = FakeRunner()
        with pytest.raises(ManualOnly):
            SelectionResolver(runner).capture("manual")
        assert runner.calls == []

    def test_clipboard_only(self):
        runner = FakeRunner().on(PRIMARY, "primary text").on(CLIPBOARD, "clip text")
        candidate = SelectionResolver(runner).capture("clipboard")

        assert candidate.source is SelectionSource.CLIPBOARD
        assert runner.calls == [CLIPBOARD]

    def test_primary_empty_does_not_fall_back(self):
        runner = FakeRunner().on(PRIMARY, " ").on(CLIPBOARD, "clip text")
        with pytest.raises(SelectionEmpty):
            SelectionResolver(runner).capture("primary")
        assert runner.calls == [PRIMARY]

    def test_read_failure(self):
        runner = FakeRunner().on(CLIPBOARD, tool_error("xsel"))
        with pytest.raises(SelectionReadFailed):
            SelectionResolver(runner).capture("clipboard")

    def test_all_failures_are_selection_unavailable(self):
        for error in (ManualOnly, SelectionEmpty, SelectionReadFailed, NoSelectionAvailable):
            assert issubclass(error, SelectionUnavailable)

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            SelectionResolver(FakeRunner()).capture("secondary")


class TestSelectionLogging:
    """Captured text only appears in logs when log_selections is on."""

    def test_text_hidden_by_default(self, caplog):
        runner = FakeRunner().on(PRIMARY, "secret words")
        with caplog.at_level(logging.INFO, logger="rabbithole"):
            SelectionResolver(runner).capture("primary")

        assert "Auto-captured from PRIMARY" in caplog.text
        assert "secret words" not in caplog.text

    def test_preview_when_enabled(self, caplog):
        runner = FakeRunner().on(PRIMARY, "x" * 50)
        with caplog.at_level(logging.INFO, logger="rabbithole"):
            SelectionResolver(runner, log_selections=True).capture("primary")

        assert "x" * 30 + "..." in caplog.text
        assert "x" * 31 not in caplog.text


class TestSelectionCandidate:
    """Candidates are always trimmed and non-empty."""

    @pytest.mark.parametrize("text", ["", " padded ", "\n"])
    def test_rejects_untrimmed(self, text):
        with pytest.raises(ValueError):
            SelectionCandidate(text, SelectionSource.MANUAL)
