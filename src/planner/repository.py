"""
Database repositories for tasks and daily productivity aggregates.
The alarm engine only reads tasks (for display names); everything else here
belongs to the planner side of the application.
"""

import sqlite3
import uuid
from datetime import date, datetime
from typing import Iterable, List, Optional

from config.logging_config import get_logger
from src.core.database import SQLiteRepository
from src.reminder.models import (
    Priority,
    ProductivityData,
    Task,
    format_instant,
    parse_instant,
)
from src.reminder.repository import ReminderRepository

logger = get_logger(__name__)


class ProductivityRepository(SQLiteRepository):
    """
    Per-day productivity aggregates (completed tasks, focus minutes).
    """

    def record_completed_task(self, day: date = None) -> ProductivityData:
        """
        Count one completed task for a day.

        Args:
            day: Calendar day (default today)

        Returns:
            Updated aggregate for that day
        """
        return self._increment(day or date.today(), completed_tasks=1)

    def add_focus_minutes(self, minutes: int, day: date = None) -> ProductivityData:
        """
        Add focus minutes to a day.

        Args:
            minutes: Minutes of focused work
            day: Calendar day (default today)

        Returns:
            Updated aggregate for that day
        """
        if minutes < 0:
            raise ValueError(f"Focus minutes must not be negative: {minutes}")
        return self._increment(day or date.today(), focus_minutes=minutes)

    def get_day(self, day: date) -> Optional[ProductivityData]:
        """
        Get the aggregate for one day.

        Args:
            day: Calendar day

        Returns:
            ProductivityData or None if nothing was recorded that day
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM productivity WHERE date = ?",
                (day.isoformat(),)
            ).fetchone()

            if row:
                return self._row_to_data(row)
            return None

    def get_all(self) -> List[ProductivityData]:
        """
        Get every recorded day, oldest first.

        Returns:
            List of ProductivityData
        """
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM productivity ORDER BY date ASC"
            ).fetchall()

            return [self._row_to_data(row) for row in rows]

    def import_records(self, records: Iterable[dict]) -> int:
        """Import aggregates from persisted-shape dictionaries."""
        imported = 0
        for record in records:
            try:
                data = ProductivityData.from_dict(record)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed productivity record {record!r}: {e}")
                continue

            with self.lock:
                with self._get_connection() as conn:
                    conn.execute(
                        """
                        INSERT OR REPLACE INTO productivity (date, completed_tasks, focus_minutes)
                        VALUES (?, ?, ?)
                        """,
                        (data.date.isoformat(), data.completed_tasks, data.focus_minutes)
                    )
                    conn.commit()
            imported += 1

        logger.info(f"Imported {imported} productivity records")
        return imported

    def export_records(self) -> List[dict]:
        """Export all aggregates in the persisted dictionary shape."""
        return [data.to_dict() for data in self.get_all()]

    def _increment(self, day: date, completed_tasks: int = 0,
                   focus_minutes: int = 0) -> ProductivityData:
        """Add to a day's counters, creating the day with zeros if missing."""
        with self.lock:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO productivity (date, completed_tasks, focus_minutes)
                    VALUES (?, ?, ?)
                    ON CONFLICT(date) DO UPDATE SET
                        completed_tasks = completed_tasks + excluded.completed_tasks,
                        focus_minutes = focus_minutes + excluded.focus_minutes
                    """,
                    (day.isoformat(), completed_tasks, focus_minutes)
                )
                conn.commit()

        data = self.get_day(day)
        logger.debug(
            f"Productivity for {day}: {data.completed_tasks} tasks, "
            f"{data.focus_minutes} focus minutes"
        )
        return data

    def _row_to_data(self, row: sqlite3.Row) -> ProductivityData:
        return ProductivityData(
            date=date.fromisoformat(row['date']),
            completed_tasks=row['completed_tasks'],
            focus_minutes=row['focus_minutes']
        )


class TaskRepository(SQLiteRepository):
    """
    Thread-safe SQLite repository for tasks.
    Deleting a task cascades to its reminders.
    """

    def __init__(self, db_path: str = None,
                 reminders: Optional[ReminderRepository] = None,
                 productivity: Optional[ProductivityRepository] = None):
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database (default from settings)
            reminders: Reminder repository for cascading deletes
            productivity: Productivity repository for completion tracking
        """
        super().__init__(db_path)
        self.reminders = reminders or ReminderRepository(self.db_path)
        self.productivity = productivity or ProductivityRepository(self.db_path)

    def create(self, name: str, category: str = "Other",
               priority: Priority = Priority.MEDIUM,
               description: str = None, due_date: date = None) -> Task:
        """
        Create a new task.

        Args:
            name: Task name
            category: Free-form category label
            priority: Task priority
            description: Optional longer description
            due_date: Optional calendar due date

        Returns:
            Created Task object
        """
        task = Task(
            id=str(uuid.uuid4()),
            name=name,
            category=category,
            created_at=datetime.now().replace(microsecond=0),
            priority=priority,
            description=description,
            due_date=due_date
        )
        self.insert(task)

        logger.info(f"Created task: {task}")
        return task

    def insert(self, task: Task) -> None:
        """Insert a fully-formed task, replacing any record with the same ID."""
        with self.lock:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO tasks
                        (id, name, description, due_date, priority,
                         category, completed, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        task.id,
                        task.name,
                        task.description,
                        task.due_date.isoformat() if task.due_date else None,
                        task.priority.value,
                        task.category,
                        task.completed,
                        format_instant(task.created_at)
                    )
                )
                conn.commit()

    def get_by_id(self, task_id: str) -> Optional[Task]:
        """
        Get task by ID.

        Args:
            task_id: Task ID

        Returns:
            Task object or None if not found
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE id = ?",
                (task_id,)
            ).fetchone()

            if row:
                return self._row_to_task(row)
            return None

    def get_all(self) -> List[Task]:
        """Get all tasks in insertion order."""
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks ORDER BY rowid ASC"
            ).fetchall()

            return [self._row_to_task(row) for row in rows]

    def update(self, task: Task) -> bool:
        """
        Update name, description, due date, priority and category of a task.
        Completion is changed through toggle_complete.

        Args:
            task: Task object with updated fields

        Returns:
            True if updated successfully
        """
        with self.lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    """
                    UPDATE tasks
                    SET name = ?,
                        description = ?,
                        due_date = ?,
                        priority = ?,
                        category = ?
                    WHERE id = ?
                    """,
                    (
                        task.name,
                        task.description,
                        task.due_date.isoformat() if task.due_date else None,
                        task.priority.value,
                        task.category,
                        task.id
                    )
                )
                conn.commit()

                success = cursor.rowcount > 0
                if success:
                    logger.debug(f"Updated task {task.id}")
                return success

    def toggle_complete(self, task_id: str) -> Optional[Task]:
        """
        Flip a task's completion flag.
        Completing a task counts towards today's productivity.

        Args:
            task_id: Task ID

        Returns:
            Updated Task or None if not found
        """
        task = self.get_by_id(task_id)
        if task is None:
            logger.warning(f"Task {task_id} not found")
            return None

        task.completed = not task.completed

        with self.lock:
            with self._get_connection() as conn:
                conn.execute(
                    "UPDATE tasks SET completed = ? WHERE id = ?",
                    (task.completed, task_id)
                )
                conn.commit()

        if task.completed:
            self.productivity.record_completed_task()

        logger.info(f"Task {task_id} marked {'completed' if task.completed else 'open'}")
        return task

    def delete(self, task_id: str) -> bool:
        """
        Delete a task and every reminder attached to it.

        Args:
            task_id: Task ID

        Returns:
            True if the task existed
        """
        with self.lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM tasks WHERE id = ?",
                    (task_id,)
                )
                conn.commit()
                success = cursor.rowcount > 0

        self.reminders.delete_for_task(task_id)

        if success:
            logger.info(f"Task {task_id} deleted")
        return success

    def import_records(self, records: Iterable[dict]) -> int:
        """Import tasks from persisted-shape dictionaries."""
        imported = 0
        for record in records:
            try:
                task = Task.from_dict(record)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed task record {record!r}: {e}")
                continue

            self.insert(task)
            imported += 1

        logger.info(f"Imported {imported} tasks")
        return imported

    def export_records(self) -> List[dict]:
        """Export all tasks in the persisted dictionary shape."""
        return [task.to_dict() for task in self.get_all()]

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        """
        Convert database row to Task object.

        Args:
            row: SQLite row

        Returns:
            Task object
        """
        return Task(
            id=row['id'],
            name=row['name'],
            category=row['category'],
            created_at=parse_instant(row['created_at']),
            priority=Priority(row['priority']),
            completed=bool(row['completed']),
            description=row['description'],
            due_date=date.fromisoformat(row['due_date']) if row['due_date'] else None
        )
