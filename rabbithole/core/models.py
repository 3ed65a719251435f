"""Core data models for research window tracking.

This module defines:
- WindowSnapshot: Set of window ids matching a signature at one instant
- RegistryEntry: Persisted research window record
- SelectionCandidate: Query text captured from a selection buffer
- ScreenSize / Rect: Geometry values for window placement
- OpenResult / CloseOutcome: Results of the lifecycle flows
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from .window_ids import WindowID, normalize_window_id


@dataclass(frozen=True)
class WindowSnapshot:
    """Window ids matching ``signature`` at one instant.

    Immutable; only used to diff against a later snapshot.
    """

    window_ids: FrozenSet[WindowID]
    signature: str = ""

    @classmethod
    def from_raw(cls, raw_ids: Iterable[str], signature: str = "") -> "WindowSnapshot":
        """Build a snapshot from raw tool output ids."""
        return cls(frozenset(normalize_window_id(r) for r in raw_ids), signature)

    def new_since(self, before: "WindowSnapshot") -> FrozenSet[WindowID]:
        """Ids present now that were absent from ``before``."""
        return self.window_ids - before.window_ids

    def __len__(self) -> int:
        return len(self.window_ids)


@dataclass(frozen=True)
class RegistryEntry:
    """A tracked research window."""

    window_id: WindowID
    created_at: datetime


class SelectionSource(str, Enum):
    """Where a query came from."""

    PRIMARY = "primary-selection"
    CLIPBOARD = "clipboard-selection"
    MANUAL = "manual"


@dataclass(frozen=True)
class SelectionCandidate:
    """Trimmed, non-empty query text and its origin."""

    text: str
    source: SelectionSource

    def __post_init__(self):
        if not self.text or self.text != self.text.strip():
            raise ValueError("selection text must be trimmed and non-empty")


@dataclass(frozen=True)
class ScreenSize:
    """Screen dimensions in pixels."""

    width: int
    height: int


FALLBACK_SCREEN = ScreenSize(1920, 1080)


@dataclass(frozen=True)
class Rect:
    """Target window geometry."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class OpenResult:
    """Outcome of open-and-track.

    ``window_id`` is None when detection timed out; ``tracked`` is True only
    after the registry accepted the window.
    """

    url: str
    window_id: Optional[WindowID] = None
    rect: Optional[Rect] = None
    positioned: bool = False
    tracked: bool = False


class CloseOutcome(str, Enum):
    """Outcome of close-if-tracked."""

    CLOSED = "closed"
    NOT_TRACKED = "not-tracked"
    NO_ACTIVE_WINDOW = "no-active-window"
