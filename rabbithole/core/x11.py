"""
Thin wrappers around the X11 command-line utilities rabbithole drives.

Tools:
- wmctrl:   window listing, un-maximize, move/resize
- xdotool:  active window, window name, close
- xsel:     PRIMARY / CLIPBOARD reads
- xdpyinfo: screen dimensions

Every call goes through CommandRunner so that failures of any kind
(missing binary, timeout, non-zero exit) arrive as ExternalToolError and
tests can substitute a fake runner.
"""

import logging
import re
import subprocess
from typing import List, Optional, Sequence, Tuple

from ..errors import ExternalToolError
from ..logging_config import log_subprocess_call
from .window_ids import WindowID

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0

_DIMENSIONS_PATTERN = re.compile(r"dimensions:\s+(\d+)x(\d+)")


class CommandRunner:
    """Run external commands with a timeout and uniform error handling."""

    def __init__(self, default_timeout: Optional[float] = DEFAULT_TIMEOUT):
        """
        Initialize runner.

        Args:
            default_timeout: Seconds before a command is abandoned
                (None disables the timeout)
        """
        self.default_timeout = default_timeout

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: Optional[float] = None,
        input_text: Optional[str] = None,
        use_default_timeout: bool = True,
    ) -> str:
        """
        Run a command to completion and return its stdout.

        Args:
            args: Command and arguments
            timeout: Override the default timeout (seconds)
            input_text: Text fed to stdin
            use_default_timeout: False for interactive tools that wait on the user

        Returns:
            Captured standard output

        Raises:
            ExternalToolError: If the tool is missing, times out or exits non-zero
        """
        cmd = list(args)
        tool = cmd[0]
        if timeout is None and use_default_timeout:
            timeout = self.default_timeout

        try:
            result = subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError:
            raise ExternalToolError(
                tool,
                "command not found",
                suggestion=f"Install {tool} (see 'rabbithole setup')",
            )
        except subprocess.TimeoutExpired:
            raise ExternalToolError(tool, f"timed out after {timeout}s")
        except OSError as e:
            raise ExternalToolError(tool, f"could not be executed: {e}")

        log_subprocess_call(cmd, result, logger)

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            detail = f": {stderr}" if stderr else ""
            raise ExternalToolError(
                tool,
                f"exited with status {result.returncode}{detail}",
                returncode=result.returncode,
            )

        return result.stdout

    def spawn(self, args: Sequence[str]) -> subprocess.Popen:
        """
        Start a detached process without waiting for it.

        Raises:
            ExternalToolError: If the executable cannot be started
        """
        cmd = list(args)
        logger.debug(f"Spawning: {' '.join(cmd)}")
        try:
            return subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise ExternalToolError(cmd[0], f"failed to start: {e}")


# wmctrl

def parse_window_list(output: str) -> List[Tuple[str, str]]:
    """
    Parse ``wmctrl -l`` output into (raw_id, title_text) pairs.

    The first whitespace-delimited token is the window id; the remainder
    (desktop, host and title) is kept as free-form text.

    Raises:
        ExternalToolError: If a line does not start with a numeric window id
    """
    windows = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split(None, 1)
        raw_id = parts[0]
        if not _looks_like_window_id(raw_id):
            raise ExternalToolError("wmctrl", f"unexpected output line: {line!r}")
        windows.append((raw_id, parts[1] if len(parts) > 1 else ""))
    return windows


def _looks_like_window_id(token: str) -> bool:
    try:
        if token.lower().startswith("0x"):
            int(token, 16)
        else:
            int(token, 10)
    except ValueError:
        return False
    return True


def list_windows(runner: CommandRunner, timeout: Optional[float] = None) -> List[Tuple[str, str]]:
    """List all top-level windows as (raw_id, title_text).

    Args:
        runner: Command runner
        timeout: Override the runner's default timeout (seconds)
    """
    return parse_window_list(runner.run(["wmctrl", "-l"], timeout=timeout))


def unmaximize_window(runner: CommandRunner, window_id: WindowID) -> None:
    """Drop the maximized state so that geometry changes take effect."""
    runner.run(["wmctrl", "-i", "-r", str(window_id), "-b", "remove,maximized_vert,maximized_horz"])


def move_resize_window(
    runner: CommandRunner, window_id: WindowID, x: int, y: int, width: int, height: int
) -> None:
    """Set window geometry (gravity 0 = keep window manager default)."""
    runner.run(["wmctrl", "-i", "-r", str(window_id), "-e", f"0,{x},{y},{width},{height}"])


# xdotool

def get_active_window(runner: CommandRunner) -> str:
    """Raw id of the focused window (decimal, as xdotool prints it)."""
    raw = runner.run(["xdotool", "getactivewindow"]).strip()
    if not raw:
        raise ExternalToolError("xdotool", "no active window reported")
    return raw


def get_window_name(runner: CommandRunner, window_id: WindowID) -> str:
    """Window title, or an empty string when it cannot be read."""
    try:
        return runner.run(["xdotool", "getwindowname", str(window_id)]).strip()
    except ExternalToolError as e:
        logger.debug(f"Could not read name of {window_id}: {e}")
        return ""


def close_window(runner: CommandRunner, window_id: WindowID) -> None:
    """Ask the window to close (WM_DELETE_WINDOW)."""
    runner.run(["xdotool", "windowclose", str(window_id)])


# xsel

SELECTION_FLAGS = {
    "primary": "--primary",
    "clipboard": "--clipboard",
}


def read_selection(runner: CommandRunner, buffer: str, timeout: float) -> str:
    """
    Read the PRIMARY or CLIPBOARD selection.

    Args:
        runner: Command runner
        buffer: "primary" or "clipboard"
        timeout: Seconds to wait for the selection owner to answer

    Raises:
        ValueError: If buffer is not a known selection
        ExternalToolError: If xsel fails or times out
    """
    try:
        flag = SELECTION_FLAGS[buffer]
    except KeyError:
        raise ValueError(f"invalid selection type: {buffer}")
    return runner.run(["xsel", "--output", flag], timeout=timeout)


# xdpyinfo

def parse_dimensions(output: str) -> Optional[Tuple[int, int]]:
    """Extract (width, height) from xdpyinfo output."""
    match = _DIMENSIONS_PATTERN.search(output)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def get_display_dimensions(runner: CommandRunner) -> Tuple[int, int]:
    """
    Query screen dimensions.

    Raises:
        ExternalToolError: If xdpyinfo fails or reports no dimensions
    """
    dimensions = parse_dimensions(runner.run(["xdpyinfo"]))
    if dimensions is None:
        raise ExternalToolError("xdpyinfo", "no 'dimensions:' line in output")
    return dimensions
