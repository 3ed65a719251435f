"""
Window identifier normalization.

X11 tools disagree on how to print a window id: wmctrl prints
``0x03a00003`` while xdotool prints ``60817411``. Every id that enters
rabbithole goes through normalize_window_id() so that comparisons, set
membership and storage only ever see one form.
"""

import re
from dataclasses import dataclass
from typing import Union

HEX_PREFIX = "0x"
HEX_WIDTH = 8
CANONICAL_PATTERN = re.compile(r"^0x[0-9a-f]{8,}$")


@dataclass(frozen=True, order=True)
class WindowID:
    """Canonical window identifier (``0x`` + 8 lowercase hex digits).

    Unrecognized raw values are kept verbatim as opaque keys; they never
    compare equal to a canonical id.
    """

    canonical: str

    def __str__(self) -> str:
        return self.canonical

    @property
    def is_canonical(self) -> bool:
        """True when the id was recognized as a hex or decimal window id."""
        return CANONICAL_PATTERN.match(self.canonical) is not None


def _parse_hex(value: str):
    try:
        return int(value[len(HEX_PREFIX):], 16)
    except ValueError:
        return None


def normalize_window_id(raw: Union[str, WindowID]) -> WindowID:
    """
    Canonicalize a window id.

    Examples:
        "0x03a00003" → 0x03a00003
        "60817411"   → 0x03a00003
        "0x3A00003"  → 0x03a00003
        "garbage"    → garbage (opaque, matches nothing)

    Args:
        raw: Raw id as printed by an X11 tool, or an existing WindowID

    Returns:
        WindowID in canonical form
    """
    if isinstance(raw, WindowID):
        return raw

    value = raw.strip()

    if value.lower().startswith(HEX_PREFIX):
        number = _parse_hex(value)
        if number is None or number < 0:
            return WindowID(value)
        return WindowID(f"{HEX_PREFIX}{number:0{HEX_WIDTH}x}")

    if value.isascii() and value.isdigit():
        return WindowID(f"{HEX_PREFIX}{int(value):0{HEX_WIDTH}x}")

    return WindowID(value)
