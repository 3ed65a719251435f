"""
Research window lifecycle.

Window states:
    Untracked → Tracked → Removed

- Untracked → Tracked: new window detected, then registry upsert succeeded
- Tracked → Removed:   closed via close_if_tracked(), or pruned by the
                       reconciler after it disappeared

A window whose detection timed out never becomes Tracked; the browser
window still opens, it just cannot be closed by hotkey.
"""

import logging
import time
from typing import Callable, List, Optional

from ..config import BehaviorConfig
from ..errors import (
    BrowserLaunchError,
    DetectionTimeout,
    ExternalToolError,
    PollTimeout,
    StoreError,
)
from ..logging_config import log_timing
from .detector import NewWindowDetector
from .geometry import apply_geometry, plan_geometry, query_screen_size
from .models import CloseOutcome, OpenResult, WindowSnapshot
from .polling import poll_until
from .reconciler import RegistryReconciler
from .registry import ResearchWindowRegistry
from .snapshot import WindowSnapshotSource
from .window_ids import normalize_window_id
from .x11 import CommandRunner, close_window, get_active_window, get_window_name

logger = logging.getLogger(__name__)

BASELINE_TIMEOUT = 1.0


class LifecycleOrchestrator:
    """Open-and-track and close-if-tracked flows."""

    def __init__(
        self,
        runner: CommandRunner,
        behavior: BehaviorConfig,
        source: WindowSnapshotSource,
        detector: NewWindowDetector,
        registry: ResearchWindowRegistry,
        reconciler: RegistryReconciler,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.runner = runner
        self.behavior = behavior
        self.source = source
        self.detector = detector
        self.registry = registry
        self.reconciler = reconciler
        self._sleep = sleep

    # Open ----------------------------------------------------------------

    def browser_command(self, url: str) -> List[str]:
        """Command line that opens ``url`` in a new browser window."""
        cmd = [self.behavior.browser_command]
        if self.behavior.firefox_profile:
            cmd += ["--profile", self.behavior.firefox_profile]
        cmd += ["--new-window", url]
        return cmd

    def open_and_track(self, url: str) -> OpenResult:
        """
        Open ``url`` in a new browser window, dock it and track it.

        Only a failure to start the browser is raised. Detection, placement
        and registration problems are logged and reflected in the result.

        Raises:
            BrowserLaunchError: If the browser executable cannot be started
        """
        result = OpenResult(url=url)
        signature = self.behavior.window_signature

        with log_timing("Open research window", logger):
            before = self._baseline(signature)

            try:
                self.runner.spawn(self.browser_command(url))
            except ExternalToolError as e:
                raise BrowserLaunchError(
                    f"failed to start {self.behavior.browser_command}: {e}",
                    "Is the browser installed? Check behavior.browser_command in the config file",
                )

            if before is None:
                logger.warning("Window list unavailable before launch; research window will not be tracked")
                return result

            try:
                window_id = self.detector.await_new_window(before, signature)
            except DetectionTimeout as e:
                logger.warning(f"Failed to detect new browser window: {e}; tracking unavailable")
                return result

            result.window_id = window_id
            result.rect = plan_geometry(query_screen_size(self.runner), self.behavior)
            result.positioned = apply_geometry(self.runner, window_id, result.rect, sleep=self._sleep)

            try:
                self.registry.upsert(window_id)
            except StoreError as e:
                logger.warning(f"Couldn't track research window {window_id}: {e}")
            else:
                result.tracked = True
                logger.info(f"Tracking research window {window_id}")

        return result

    def _baseline(self, signature: str) -> Optional[WindowSnapshot]:
        """Pre-launch snapshot, retried briefly; None if the list stays unreadable.

        Without a baseline every existing browser window would look new.
        """
        try:
            return poll_until(
                lambda remaining: self.detector.snapshot(signature, remaining),
                lambda snapshot: snapshot,
                interval=self.detector.interval,
                timeout=BASELINE_TIMEOUT,
                clock=self.detector.clock,
                sleep=self.detector.sleep,
                description="window list",
            )
        except PollTimeout as e:
            logger.warning(f"Couldn't list windows before launch: {e}")
            return None

    # Close ---------------------------------------------------------------

    def close_if_tracked(self) -> CloseOutcome:
        """
        Close the focused window if (and only if) rabbithole opened it.

        Meant to be bound to a global hotkey, so an untracked or missing
        active window is a silent no-op.

        Raises:
            StoreError: If the registry cannot be read or updated
            ExternalToolError: If closing a tracked window fails
        """
        with log_timing("Close research window", logger):
            try:
                raw_active = get_active_window(self.runner)
            except ExternalToolError as e:
                logger.warning(f"Couldn't get active window: {e}")
                return CloseOutcome.NO_ACTIVE_WINDOW

            active = normalize_window_id(raw_active)

            try:
                self.reconciler.reconcile()
            except ExternalToolError as e:
                logger.warning(f"Couldn't clean up dead windows: {e}")

            if not self.registry.contains(active):
                logger.debug(f"Active window {active} is not a research window")
                return CloseOutcome.NOT_TRACKED

            name = get_window_name(self.runner, active)
            close_window(self.runner, active)
            self.registry.remove(active)

            logger.info(f"Closed research window: {active} ({name})")
            return CloseOutcome.CLOSED
