"""
SQLite plumbing shared by the repositories.
One database file holds tasks, reminders and productivity aggregates.
"""

import sqlite3
import threading
from contextlib import contextmanager

from config.logging_config import get_logger
from config import settings

logger = get_logger(__name__)


class SQLiteRepository:
    """
    Base class for thread-safe SQLite repositories.
    """

    SCHEMA = """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        due_date TEXT,
        priority TEXT NOT NULL DEFAULT 'medium',
        category TEXT NOT NULL DEFAULT 'Other',
        completed BOOLEAN NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    );

    CREATE TABLE IF NOT EXISTS reminders (
        id TEXT PRIMARY KEY,
        task_id TEXT NOT NULL,
        time TEXT NOT NULL,
        sound BOOLEAN NOT NULL DEFAULT 1,
        vibration BOOLEAN NOT NULL DEFAULT 1,
        snooze BOOLEAN NOT NULL DEFAULT 1,
        repeat TEXT NOT NULL DEFAULT 'none',
        days TEXT,
        enabled BOOLEAN NOT NULL DEFAULT 1,
        triggered_at TEXT
    );

    CREATE TABLE IF NOT EXISTS productivity (
        date TEXT PRIMARY KEY,
        completed_tasks INTEGER NOT NULL DEFAULT 0,
        focus_minutes INTEGER NOT NULL DEFAULT 0
    );

    CREATE INDEX IF NOT EXISTS idx_reminders_task_id ON reminders(task_id);
    """

    def __init__(self, db_path: str = None):
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database (default from settings)
        """
        self.db_path = db_path or str(settings.DB_PATH)
        self.lock = threading.Lock()

        logger.debug(f"{type(self).__name__} initialized: {self.db_path}")
        self._initialize_database()

    def _initialize_database(self) -> None:
        """Create database schema if it doesn't exist."""
        try:
            with self._get_connection() as conn:
                conn.executescript(self.SCHEMA)
                conn.commit()

        except sqlite3.Error as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    @contextmanager
    def _get_connection(self):
        """
        Get database connection (context manager).

        Yields:
            SQLite connection
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row  # Access columns by name
        try:
            yield conn
        finally:
            conn.close()
