"""
Window snapshot source.

Read-only view of the window manager's top-level window list. Each call
runs ``wmctrl -l`` afresh; nothing is cached between calls because the
list changes behind our back.
"""

import logging
from typing import FrozenSet, Optional

from .models import WindowSnapshot
from .window_ids import WindowID, normalize_window_id
from .x11 import CommandRunner, list_windows

logger = logging.getLogger(__name__)


class WindowSnapshotSource:
    """Query current windows, optionally filtered by title signature."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def snapshot(self, app_signature: str, timeout: Optional[float] = None) -> WindowSnapshot:
        """
        Capture ids of windows whose title text contains ``app_signature``.

        Raises:
            ExternalToolError: If wmctrl is missing, fails or prints garbage
        """
        windows = list_windows(self.runner, timeout)
        matching = [raw_id for raw_id, title in windows if app_signature in title]
        snapshot = WindowSnapshot.from_raw(matching, app_signature)
        logger.debug(
            f"Snapshot '{app_signature}': {len(snapshot)} of {len(windows)} windows"
        )
        return snapshot

    def live_window_ids(self) -> FrozenSet[WindowID]:
        """
        Ids of every top-level window, unfiltered.

        Raises:
            ExternalToolError: If wmctrl is missing, fails or prints garbage
        """
        return frozenset(normalize_window_id(raw_id) for raw_id, _ in list_windows(self.runner))
