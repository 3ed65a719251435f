"""
Error types for rabbithole.

Expected outcomes (empty selections, detection timeouts) and real failures
(a broken store, a missing tool) share one base class so the CLI can print
any of them with a remediation hint and pick an exit code.
"""

from typing import Optional


class RabbitholeError(Exception):
    """Base exception for all rabbithole errors."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            suggestion: Suggested recovery action
        """
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


# External tools

class ExternalToolError(RabbitholeError):
    """An external X11 utility failed, timed out or printed garbage."""

    def __init__(
        self,
        tool: str,
        message: str,
        returncode: Optional[int] = None,
        suggestion: Optional[str] = None,
    ):
        self.tool = tool
        self.returncode = returncode
        super().__init__(f"{tool}: {message}", suggestion)


class BrowserLaunchError(RabbitholeError):
    """The browser process could not be started."""


class MenuCancelled(RabbitholeError):
    """The menu was dismissed or returned nothing usable."""


# Selection capture outcomes

class SelectionUnavailable(RabbitholeError):
    """No query could be taken from the selection buffers.

    Callers fall back to prompting for the query interactively.
    """


class ManualOnly(SelectionUnavailable):
    """Selection method is ``manual``; the buffers are never read."""


class SelectionEmpty(SelectionUnavailable):
    """The selection buffer held nothing but whitespace."""


class SelectionReadFailed(SelectionUnavailable):
    """Reading a selection buffer failed or timed out."""


class NoSelectionAvailable(SelectionUnavailable):
    """Neither PRIMARY nor CLIPBOARD produced any text."""


# Polling

class PollTimeout(RabbitholeError):
    """A bounded poll reached its deadline without success."""

    def __init__(self, message: str, attempts: int = 0, elapsed: float = 0.0):
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(message)


class DetectionTimeout(PollTimeout):
    """No new window appeared before the detection deadline."""


# Persistence and configuration

class StoreError(RabbitholeError):
    """The window registry or search history could not be read or written."""


class StoreLocationError(StoreError):
    """No writable location exists for the database."""


class ConfigError(RabbitholeError):
    """Configuration file is missing, unreadable or invalid."""
