"""
New-window detection.

After launching the browser we need to know which window it created. The
window manager lists windows asynchronously relative to process start, so
we diff repeated snapshots against one taken before the launch.

If the browser reuses an existing window nothing new ever appears and
detection times out; callers treat that as "tracking unavailable".
"""

import logging
import time
from typing import Callable, Optional

from ..errors import DetectionTimeout
from .models import WindowSnapshot
from .polling import poll_until
from .snapshot import WindowSnapshotSource
from .window_ids import WindowID
from .x11 import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_DETECTION_TIMEOUT = 5.0


class NewWindowDetector:
    """Wait for a window that was not in a before-launch snapshot."""

    def __init__(
        self,
        source: WindowSnapshotSource,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_DETECTION_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize detector.

        Args:
            source: Snapshot source to poll
            interval: Seconds between polls (default: 0.1)
            timeout: Seconds before giving up (default: 5.0)
            clock: Monotonic time source
            sleep: Sleep function
        """
        self.source = source
        self.interval = interval
        self.timeout = timeout
        self.clock = clock
        self.sleep = sleep

    def snapshot(self, app_signature: str, remaining: float) -> WindowSnapshot:
        """
        Take one snapshot with wmctrl bounded by the time left to poll.

        A hung wmctrl is abandoned after ``remaining`` seconds (never less
        than one poll interval, never more than the runner default).
        """
        timeout = min(DEFAULT_TIMEOUT, max(remaining, self.interval))
        return self.source.snapshot(app_signature, timeout=timeout)

    def await_new_window(self, before: WindowSnapshot, app_signature: str) -> WindowID:
        """
        Poll until a window matching ``app_signature`` appears that is not
        in ``before``.

        When several new windows appear in the same tick the lowest id wins,
        so the choice does not depend on set iteration order.

        Raises:
            DetectionTimeout: If no new window appears before the deadline
        """

        def pick_new(current: WindowSnapshot) -> Optional[WindowID]:
            new_ids = current.new_since(before)
            if not new_ids:
                return None
            if len(new_ids) > 1:
                logger.info(
                    f"{len(new_ids)} new '{app_signature}' windows appeared at once: "
                    f"{', '.join(sorted(str(w) for w in new_ids))}"
                )
            return min(new_ids)

        window_id = poll_until(
            lambda remaining: self.snapshot(app_signature, remaining),
            pick_new,
            interval=self.interval,
            timeout=self.timeout,
            clock=self.clock,
            sleep=self.sleep,
            timeout_error=DetectionTimeout,
            description=f"new '{app_signature}' window",
        )
        logger.info(f"Detected new window: {window_id}")
        return window_id
