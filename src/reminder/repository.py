"""
Database repository for reminders.
This is the Reminder Store the alarm engine reads each tick and writes
dismiss/snooze transitions back into.
"""

import json
import sqlite3
import uuid
from typing import Iterable, List, Optional

from config.logging_config import get_logger
from src.core.database import SQLiteRepository
from src.reminder.models import Reminder, RepeatPolicy, format_instant, parse_instant

logger = get_logger(__name__)


class ReminderRepository(SQLiteRepository):
    """
    Thread-safe SQLite repository for reminders.
    Reminders are always returned in insertion order.
    """

    def create(self, task_id: str, time: str, sound: bool = True,
               vibration: bool = True, snooze: bool = True,
               repeat: RepeatPolicy = RepeatPolicy.NONE,
               days: Optional[List[bool]] = None,
               enabled: bool = True) -> Reminder:
        """
        Create a new reminder.

        Args:
            task_id: Related task ID
            time: Time of day as "HH:MM"
            sound: Play the alarm tone when triggered
            vibration: Pulse the vibration motor when triggered
            snooze: Whether the alarm may be snoozed
            repeat: Recurrence policy
            days: Day-of-week selection for custom repeat (Sunday first)
            enabled: Whether the reminder is evaluated at all

        Returns:
            Created Reminder object
        """
        reminder = Reminder(
            id=str(uuid.uuid4()),
            task_id=task_id,
            time=time,
            sound=sound,
            vibration=vibration,
            snooze=snooze,
            repeat=repeat,
            days=days,
            enabled=enabled
        )
        self.insert(reminder)

        logger.info(f"Created reminder: {reminder}")
        return reminder

    def insert(self, reminder: Reminder) -> None:
        """
        Insert a fully-formed reminder, replacing any record with the same ID.

        Args:
            reminder: Reminder to store
        """
        with self.lock:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO reminders
                        (id, task_id, time, sound, vibration, snooze,
                         repeat, days, enabled, triggered_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    self._reminder_to_params(reminder)
                )
                conn.commit()

    def get_by_id(self, reminder_id: str) -> Optional[Reminder]:
        """
        Get reminder by ID.

        Args:
            reminder_id: Reminder ID

        Returns:
            Reminder object or None if not found
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM reminders WHERE id = ?",
                (reminder_id,)
            ).fetchone()

            if row:
                return self._row_to_reminder(row)
            return None

    def get_all(self) -> List[Reminder]:
        """
        Get all reminders, enabled or not.

        Returns:
            List of Reminder objects in insertion order
        """
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM reminders ORDER BY rowid ASC"
            ).fetchall()

        return self._rows_to_reminders(rows)

    def get_for_task(self, task_id: str) -> List[Reminder]:
        """
        Get reminders attached to a task.

        Args:
            task_id: Task ID

        Returns:
            List of Reminder objects in insertion order
        """
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM reminders WHERE task_id = ? ORDER BY rowid ASC",
                (task_id,)
            ).fetchall()

        return self._rows_to_reminders(rows)

    def update(self, reminder: Reminder) -> bool:
        """
        Update an existing reminder.

        Args:
            reminder: Reminder object with updated fields

        Returns:
            True if updated successfully
        """
        params = self._reminder_to_params(reminder)

        with self.lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    """
                    UPDATE reminders
                    SET task_id = ?,
                        time = ?,
                        sound = ?,
                        vibration = ?,
                        snooze = ?,
                        repeat = ?,
                        days = ?,
                        enabled = ?,
                        triggered_at = ?
                    WHERE id = ?
                    """,
                    params[1:] + params[:1]
                )
                conn.commit()

                success = cursor.rowcount > 0
                if success:
                    logger.debug(f"Updated reminder {reminder.id}")
                else:
                    logger.warning(f"Reminder {reminder.id} not found for update")
                return success

    def delete(self, reminder_id: str) -> bool:
        """
        Permanently delete a reminder.

        Args:
            reminder_id: Reminder ID

        Returns:
            True if deleted successfully
        """
        with self.lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM reminders WHERE id = ?",
                    (reminder_id,)
                )
                conn.commit()

                success = cursor.rowcount > 0
                if success:
                    logger.info(f"Reminder {reminder_id} deleted")
                return success

    def delete_for_task(self, task_id: str) -> int:
        """
        Delete every reminder attached to a task.

        Args:
            task_id: Task ID

        Returns:
            Number of reminders deleted
        """
        with self.lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM reminders WHERE task_id = ?",
                    (task_id,)
                )
                conn.commit()

                deleted_count = cursor.rowcount
                if deleted_count > 0:
                    logger.info(f"Deleted {deleted_count} reminders of task {task_id}")
                return deleted_count

    def import_records(self, records: Iterable[dict]) -> int:
        """
        Import reminders from persisted-shape dictionaries.
        Malformed records are skipped.

        Args:
            records: Reminder dictionaries

        Returns:
            Number of reminders imported
        """
        imported = 0
        for record in records:
            try:
                reminder = Reminder.from_dict(record)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed reminder record {record!r}: {e}")
                continue

            self.insert(reminder)
            imported += 1

        logger.info(f"Imported {imported} reminders")
        return imported

    def export_records(self) -> List[dict]:
        """
        Export all reminders in the persisted dictionary shape.

        Returns:
            List of reminder dictionaries
        """
        return [reminder.to_dict() for reminder in self.get_all()]

    def _reminder_to_params(self, reminder: Reminder) -> tuple:
        """Column values for a reminder, ID first."""
        return (
            reminder.id,
            reminder.task_id,
            reminder.time,
            reminder.sound,
            reminder.vibration,
            reminder.snooze,
            reminder.repeat.value,
            json.dumps(reminder.days) if reminder.days is not None else None,
            reminder.enabled,
            format_instant(reminder.triggered_at)
        )

    def _rows_to_reminders(self, rows: List[sqlite3.Row]) -> List[Reminder]:
        """Convert rows, skipping any that cannot be decoded."""
        reminders = []
        for row in rows:
            try:
                reminders.append(self._row_to_reminder(row))
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable reminder row {row['id']}: {e}")
        return reminders

    def _row_to_reminder(self, row: sqlite3.Row) -> Reminder:
        """
        Convert database row to Reminder object.

        Args:
            row: SQLite row

        Returns:
            Reminder object
        """
        return Reminder(
            id=row['id'],
            task_id=row['task_id'],
            time=row['time'],
            sound=bool(row['sound']),
            vibration=bool(row['vibration']),
            snooze=bool(row['snooze']),
            repeat=RepeatPolicy(row['repeat']),
            days=json.loads(row['days']) if row['days'] is not None else None,
            enabled=bool(row['enabled']),
            triggered_at=parse_instant(row['triggered_at'])
        )
