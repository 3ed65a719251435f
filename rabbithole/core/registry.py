"""
Research window registry.

The durable answer to "did rabbithole open this window?". Keys are
canonical WindowIDs; every public method is a single transaction and is
idempotent, so a repeated or interrupted command leaves the table in a
consistent state.
"""

import logging
import re
from datetime import datetime
from typing import FrozenSet, List, Optional

from .models import RegistryEntry
from .store import Database
from .window_ids import WindowID, normalize_window_id

logger = logging.getLogger(__name__)

_FRACTION_PATTERN = re.compile(r"\.(\d+)")


class ResearchWindowRegistry:
    """Persistent set of tracked window ids with creation times."""

    def __init__(self, db: Database):
        self.db = db

    def upsert(self, window_id: WindowID, created_at: Optional[datetime] = None) -> None:
        """
        Track a window, refreshing the timestamp if it is already tracked.

        Raises:
            StoreError: If the write fails
        """
        window_id = normalize_window_id(window_id)
        created_at = created_at or datetime.now()
        with self.db.transaction("track research window") as conn:
            conn.execute(
                "INSERT OR REPLACE INTO research_windows (window_id, created_at) VALUES (?, ?)",
                (str(window_id), created_at.isoformat(sep=" ")),
            )
        logger.debug(f"Tracked research window {window_id}")

    def remove(self, window_id: WindowID) -> bool:
        """
        Stop tracking a window. Removing an untracked id is a no-op.

        Returns:
            True if a row was deleted

        Raises:
            StoreError: If the write fails
        """
        window_id = normalize_window_id(window_id)
        with self.db.transaction("remove research window") as conn:
            cursor = conn.execute(
                "DELETE FROM research_windows WHERE window_id = ?", (str(window_id),)
            )
        removed = cursor.rowcount > 0
        if removed:
            logger.debug(f"Untracked research window {window_id}")
        return removed

    def contains(self, window_id: WindowID) -> bool:
        """
        Whether a window is tracked.

        Raises:
            StoreError: If the read fails
        """
        window_id = normalize_window_id(window_id)
        with self.db.transaction("check research window status") as conn:
            row = conn.execute(
                "SELECT 1 FROM research_windows WHERE window_id = ?", (str(window_id),)
            ).fetchone()
        return row is not None

    def list_all(self) -> FrozenSet[WindowID]:
        """
        Point-in-time set of tracked ids.

        Raises:
            StoreError: If the read fails
        """
        with self.db.transaction("list research windows") as conn:
            rows = conn.execute("SELECT window_id FROM research_windows").fetchall()
        return frozenset(normalize_window_id(row["window_id"]) for row in rows)

    def entries(self) -> List[RegistryEntry]:
        """
        Tracked windows with creation times, oldest first.

        Raises:
            StoreError: If the read fails
        """
        with self.db.transaction("list research windows") as conn:
            rows = conn.execute(
                "SELECT window_id, created_at FROM research_windows ORDER BY created_at"
            ).fetchall()
        return [
            RegistryEntry(normalize_window_id(row["window_id"]), _parse_timestamp(row["created_at"]))
            for row in rows
        ]


def _parse_timestamp(value) -> datetime:
    """Parse a stored created_at value into naive local time.

    Accepted forms:
    - "YYYY-MM-DD HH:MM:SS" (SQLite CURRENT_TIMESTAMP)
    - isoformat() output, with either separator
    - "YYYY-MM-DD HH:MM:SS.nnnnnnnnn+HH:MM" (nanoseconds and an offset,
      as stored by earlier rabbithole releases)

    Unparseable values map to datetime.min.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = _FRACTION_PATTERN.sub(_microseconds, str(value).strip())
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Unparseable created_at value: {value!r}")
            return datetime.min

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _microseconds(match) -> str:
    # fromisoformat() before 3.11 only takes 3 or 6 fractional digits
    return "." + match.group(1)[:6].ljust(6, "0")
