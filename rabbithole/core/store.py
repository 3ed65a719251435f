"""SQLite database holding research windows and search history."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from ..errors import StoreError

logger = logging.getLogger(__name__)


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS searches (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        query TEXT NOT NULL,
        engine_name TEXT NOT NULL,
        engine_url TEXT NOT NULL,
        trigger_method TEXT NOT NULL DEFAULT 'selection',
        timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        session_id TEXT DEFAULT ''
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS research_windows (
        window_id TEXT PRIMARY KEY,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
)


class Database:
    """Connection owner for the rabbithole database.

    One instance per command invocation; access is sequential.
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Open (and create if needed) the database.

        Args:
            db_path: File path, or ":memory:" for tests

        Raises:
            StoreError: If the file cannot be opened or the schema created
        """
        self.db_path = str(db_path)
        try:
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row
            self._init_tables()
        except sqlite3.Error as e:
            raise StoreError(
                f"failed to open database {self.db_path}: {e}",
                "Check permissions or set database.path in the config file",
            )
        logger.debug(f"Opened database {self.db_path}")

    def _init_tables(self) -> None:
        """Create necessary tables if they don't exist"""
        with self.conn:
            for statement in SCHEMA:
                self.conn.execute(statement)

    @contextmanager
    def transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        """
        Run statements in one transaction, translating sqlite errors.

        Args:
            action: Description used in the error message

        Raises:
            StoreError: If any statement fails (the transaction is rolled back)
        """
        try:
            with self.conn:
                yield self.conn
        except sqlite3.Error as e:
            raise StoreError(f"couldn't {action}: {e}")

    def close(self) -> None:
        """Close database connection"""
        self.conn.close()
