"""rabbithole - hotkey-driven research windows for X11 desktops.

This package provides:
- Selection capture from the PRIMARY and CLIPBOARD buffers
- Search engine menus via dmenu
- Browser windows docked on the right edge of the screen
- Tracking of the windows it opened so they can be closed by hotkey
"""

__version__ = "0.2.0"
__author__ = "rabbithole contributors"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__license__"]
