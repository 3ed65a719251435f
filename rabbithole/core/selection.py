"""
Selection capture with an ordered fallback policy.

Policies:
- manual:    never read the buffers; the caller prompts instead
- primary:   PRIMARY only (text highlighted with the mouse)
- clipboard: CLIPBOARD only (text copied with Ctrl+C)
- auto:      PRIMARY, then CLIPBOARD

PRIMARY comes first under ``auto`` because highlighting is the cheapest
gesture and CLIPBOARD often still holds something copied long ago.
"""

import logging

from ..errors import (
    ExternalToolError,
    ManualOnly,
    NoSelectionAvailable,
    SelectionEmpty,
    SelectionReadFailed,
    SelectionUnavailable,
)
from .models import SelectionCandidate, SelectionSource
from .x11 import CommandRunner, read_selection

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 30

BUFFER_SOURCES = {
    "primary": SelectionSource.PRIMARY,
    "clipboard": SelectionSource.CLIPBOARD,
}

AUTO_ORDER = ("primary", "clipboard")


class SelectionResolver:
    """Produce a query from the X selection buffers."""

    def __init__(self, runner: CommandRunner, timeout: float = 1.0, log_selections: bool = False):
        """
        Initialize resolver.

        Args:
            runner: Command runner used for xsel
            timeout: Per-read timeout in seconds
            log_selections: Include a text preview in log messages
        """
        self.runner = runner
        self.timeout = timeout
        self.log_selections = log_selections

    def capture(self, policy: str) -> SelectionCandidate:
        """
        Capture query text according to ``policy``.

        Raises:
            ManualOnly: policy is "manual"
            SelectionEmpty: the chosen buffer holds only whitespace
            SelectionReadFailed: the chosen buffer could not be read
            NoSelectionAvailable: "auto" found nothing in either buffer
            ValueError: unknown policy
        """
        if policy == "manual":
            raise ManualOnly("selection method set to manual")

        if policy in BUFFER_SOURCES:
            return self.capture_from(policy)

        if policy != "auto":
            raise ValueError(f"unknown selection method: {policy}")

        reasons = []
        for buffer in AUTO_ORDER:
            try:
                return self.capture_from(buffer)
            except SelectionUnavailable as e:
                logger.debug(f"{buffer.upper()} unavailable: {e}")
                reasons.append(str(e))

        raise NoSelectionAvailable(
            "no text in PRIMARY or CLIPBOARD selections (" + "; ".join(reasons) + ")"
        )

    def capture_from(self, buffer: str) -> SelectionCandidate:
        """
        Read one buffer ("primary" or "clipboard").

        Raises:
            SelectionEmpty: Buffer holds only whitespace
            SelectionReadFailed: xsel failed or timed out
        """
        try:
            text = read_selection(self.runner, buffer, self.timeout)
        except ExternalToolError as e:
            raise SelectionReadFailed(f"{buffer} selection could not be read: {e}")

        trimmed = text.strip()
        if not trimmed:
            raise SelectionEmpty(f"{buffer} selection is empty")

        if self.log_selections:
            logger.info(
                f"Auto-captured from {buffer.upper()} selection "
                f"({len(trimmed)} chars): {trimmed[:PREVIEW_CHARS]}..."
            )
        else:
            logger.info(f"Auto-captured from {buffer.upper()} selection ({len(trimmed)} chars)")

        return SelectionCandidate(trimmed, BUFFER_SOURCES[buffer])
