"""Append-only log of searches."""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from .store import Database

logger = logging.getLogger(__name__)


class SearchHistory:
    """Search records grouped into one session per calendar day."""

    def __init__(self, db: Database):
        self.db = db

    def record(
        self,
        query: str,
        engine_name: str,
        engine_url: str,
        trigger_method: str,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Append a search record.

        Returns:
            Row id of the new record

        Raises:
            StoreError: If the write fails
        """
        now = now or datetime.now()
        with self.db.transaction("record search") as conn:
            cursor = conn.execute(
                "INSERT INTO searches (query, engine_name, engine_url, trigger_method, timestamp, session_id) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    query,
                    engine_name,
                    engine_url,
                    trigger_method,
                    now.isoformat(sep=" ", timespec="seconds"),
                    now.strftime("%Y-%m-%d"),
                ),
            )
        return cursor.lastrowid

    def recent(self, limit: int = 20) -> List[Dict]:
        """Most recent searches, newest first."""
        with self.db.transaction("read search history") as conn:
            rows = conn.execute(
                "SELECT query, engine_name, trigger_method, timestamp, session_id "
                "FROM searches ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [dict(row) for row in rows]
