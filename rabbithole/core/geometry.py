"""
Research window placement.

Windows are docked against the right screen edge: x is measured back from
the right edge by the configured width plus margin, y is a fixed margin
from the top.
"""

import logging
import time
from typing import Callable

from ..config import BehaviorConfig
from ..errors import ExternalToolError
from .models import FALLBACK_SCREEN, Rect, ScreenSize
from .window_ids import WindowID
from .x11 import CommandRunner, get_display_dimensions, move_resize_window, unmaximize_window

logger = logging.getLogger(__name__)

UNMAXIMIZE_SETTLE = 0.1


def query_screen_size(runner: CommandRunner) -> ScreenSize:
    """Screen size from xdpyinfo, or 1920x1080 when that fails."""
    try:
        width, height = get_display_dimensions(runner)
    except ExternalToolError as e:
        logger.warning(
            f"Could not read screen size ({e}); "
            f"assuming {FALLBACK_SCREEN.width}x{FALLBACK_SCREEN.height}"
        )
        return FALLBACK_SCREEN
    return ScreenSize(width, height)


def plan_geometry(screen: ScreenSize, behavior: BehaviorConfig) -> Rect:
    """
    Compute the docked rectangle for a research window.

    Args:
        screen: Screen dimensions
        behavior: Configured size and margins

    Returns:
        Rect anchored to the right edge (x never goes negative)
    """
    x = screen.width - behavior.window_width - behavior.margin_right
    return Rect(
        x=max(0, x),
        y=behavior.margin_top,
        width=behavior.window_width,
        height=behavior.window_height,
    )


def apply_geometry(
    runner: CommandRunner,
    window_id: WindowID,
    rect: Rect,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Un-maximize and move/resize a window.

    Failures are logged, never raised: a badly placed window is still
    usable.

    Returns:
        True when the final move/resize succeeded
    """
    try:
        unmaximize_window(runner, window_id)
    except ExternalToolError as e:
        logger.warning(f"Failed to un-maximize window {window_id}: {e}")

    # Give the window manager a moment to apply the state change
    sleep(UNMAXIMIZE_SETTLE)

    try:
        move_resize_window(runner, window_id, rect.x, rect.y, rect.width, rect.height)
    except ExternalToolError as e:
        logger.warning(f"Failed to position window {window_id}: {e}")
        return False

    logger.info(
        f"Positioned window {window_id} at {rect.x},{rect.y} "
        f"with size {rect.width}x{rect.height}"
    )
    return True
