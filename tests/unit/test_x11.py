"""Unit tests for the X11 tool wrappers."""

import subprocess
from unittest.mock import patch

import pytest

from conftest import FakeRunner, tool_error
from rabbithole.core.window_ids import normalize_window_id
from rabbithole.core.x11 import (
    CommandRunner,
    close_window,
    get_active_window,
    get_display_dimensions,
    get_window_name,
    move_resize_window,
    parse_dimensions,
    parse_window_list,
    read_selection,
)
from rabbithole.errors import ExternalToolError


def completed(args, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)


class TestCommandRunner:
    """Every failure mode surfaces as ExternalToolError."""

    def test_returns_stdout(self):
        with patch("rabbithole.core.x11.subprocess.run") as mock_run:
            mock_run.return_value = completed(["wmctrl", "-l"], stdout="output\n")
            assert CommandRunner().run(["wmctrl", "-l"]) == "output\n"

        kwargs = mock_run.call_args.kwargs
        assert kwargs["timeout"] == 2.0
        assert kwargs["capture_output"] is True
        assert kwargs["check"] is False

    def test_explicit_timeout_and_input(self):
        with patch("rabbithole.core.x11.subprocess.run") as mock_run:
            mock_run.return_value = completed(["xsel"])
            CommandRunner().run(["xsel"], timeout=0.5, input_text="abc")

        assert mock_run.call_args.kwargs["timeout"] == 0.5
        assert mock_run.call_args.kwargs["input"] == "abc"

    def test_interactive_call_has_no_timeout(self):
        with patch("rabbithole.core.x11.subprocess.run") as mock_run:
            mock_run.return_value = completed(["dmenu"])
            CommandRunner().run(["dmenu"], use_default_timeout=False)

        assert mock_run.call_args.kwargs["timeout"] is None

    def test_missing_binary(self):
        with patch("rabbithole.core.x11.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(ExternalToolError) as exc_info:
                CommandRunner().run(["xdpyinfo"])

        assert exc_info.value.tool == "xdpyinfo"
        assert "not found" in str(exc_info.value)
        assert exc_info.value.suggestion

    def test_timeout(self):
        error = subprocess.TimeoutExpired(["xsel"], 1.0)
        with patch("rabbithole.core.x11.subprocess.run", side_effect=error):
            with pytest.raises(ExternalToolError, match="timed out"):
                CommandRunner().run(["xsel"], timeout=1.0)

    def test_nonzero_exit_keeps_returncode(self):
        with patch("rabbithole.core.x11.subprocess.run") as mock_run:
            mock_run.return_value = completed(["dmenu"], returncode=1, stderr="cancelled")
            with pytest.raises(ExternalToolError) as exc_info:
                CommandRunner().run(["dmenu"])

        assert exc_info.value.returncode == 1
        assert "cancelled" in str(exc_info.value)

    def test_spawn_failure(self):
        with patch("rabbithole.core.x11.subprocess.Popen", side_effect=OSError("no such file")):
            with pytest.raises(ExternalToolError, match="failed to start"):
                CommandRunner().spawn(["firefox", "--new-window", "https://example.com"])

    def test_spawn_detaches(self):
        with patch("rabbithole.core.x11.subprocess.Popen") as mock_popen:
            CommandRunner().spawn(["firefox"])

        assert mock_popen.call_args.kwargs["start_new_session"] is True
        assert mock_popen.call_args.kwargs["stdout"] is subprocess.DEVNULL


class TestParseWindowList:
    """wmctrl -l output parsing."""

    def test_parses_id_and_title(self):
        output = (
            "0x03a00003  0 host Some page - Mozilla Firefox\n"
            "0x01e00007 -1 host xterm\n"
        )
        assert parse_window_list(output) == [
            ("0x03a00003", "0 host Some page - Mozilla Firefox"),
            ("0x01e00007", "-1 host xterm"),
        ]

    def test_skips_blank_lines(self):
        assert parse_window_list("\n  \n") == []

    def test_decimal_ids_accepted(self):
        assert parse_window_list("60817411 0 host title") == [("60817411", "0 host title")]

    def test_garbage_line_raises(self):
        with pytest.raises(ExternalToolError, match="unexpected output"):
            parse_window_list("Cannot open display.\n")


class TestXdotool:
    """Active window, window name and close."""

    def test_get_active_window(self):
        runner = FakeRunner().on(["xdotool", "getactivewindow"], "60817411\n")
        assert get_active_window(runner) == "60817411"

    def test_get_active_window_empty(self):
        runner = FakeRunner().on(["xdotool", "getactivewindow"], "\n")
        with pytest.raises(ExternalToolError):
            get_active_window(runner)

    def test_get_window_name_failure_is_empty(self):
        runner = FakeRunner().on(["xdotool", "getwindowname"], tool_error("xdotool"))
        assert get_window_name(runner, normalize_window_id("1")) == ""

    def test_close_window_uses_canonical_id(self):
        runner = FakeRunner().on(["xdotool", "windowclose"], "")
        close_window(runner, normalize_window_id("60817411"))
        assert runner.calls == [["xdotool", "windowclose", "0x03a00003"]]

    def test_move_resize_arguments(self):
        runner = FakeRunner().on(["wmctrl"], "")
        move_resize_window(runner, normalize_window_id("1"), 10, 20, 650, 900)
        assert runner.calls == [["wmctrl", "-i", "-r", "0x00000001", "-e", "0,10,20,650,900"]]


class TestSelectionAndDisplay:
    """xsel and xdpyinfo wrappers."""

    @pytest.mark.parametrize("buffer,flag", [("primary", "--primary"), ("clipboard", "--clipboard")])
    def test_read_selection_flags(self, buffer, flag):
        runner = FakeRunner().on(["xsel"], "text")
        assert read_selection(runner, buffer, timeout=0.5) == "text"
        assert runner.calls == [["xsel", "--output", flag]]
        assert runner.timeouts == [0.5]

    def test_read_selection_never_clears(self):
        """Reading must not pass xsel's clear/delete flags."""
        runner = FakeRunner().on(["xsel"], "text")
        read_selection(runner, "primary", timeout=1.0)
        assert "-c" not in runner.calls[0]
        assert "--clear" not in runner.calls[0]

    def test_read_selection_unknown_buffer(self):
        with pytest.raises(ValueError):
            read_selection(FakeRunner(), "secondary", timeout=1.0)

    def test_parse_dimensions(self):
        output = "screen #0:\n  dimensions:    2560x1440 pixels (677x381 millimeters)\n"
        assert parse_dimensions(output) == (2560, 1440)

    def test_parse_dimensions_missing(self):
        assert parse_dimensions("name of display: :0\n") is None

    def test_get_display_dimensions_without_line(self):
        runner = FakeRunner().on(["xdpyinfo"], "name of display: :0\n")
        with pytest.raises(ExternalToolError):
            get_display_dimensions(runner)
