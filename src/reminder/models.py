"""
Data models for tasks, reminders and productivity aggregates.
Field names on the Python side are snake_case; to_dict/from_dict speak the
persisted camelCase JSON shape.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from dateutil import parser as date_parser

from config import settings


class Priority(Enum):
    """Task priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RepeatPolicy(Enum):
    """Reminder recurrence policies."""
    NONE = "none"
    DAILY = "daily"
    CUSTOM = "custom"


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 instant into a naive local datetime.

    Offset-aware values (e.g. a trailing 'Z') are converted to local
    wall-clock time, since the engine only deals in local time.
    """
    if not value:
        return None

    instant = date_parser.isoparse(value)
    if instant.tzinfo is not None:
        instant = instant.astimezone().replace(tzinfo=None)
    return instant


def format_instant(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as ISO-8601 with seconds precision."""
    if value is None:
        return None
    return value.isoformat(timespec="seconds")


@dataclass
class Task:
    """Task data model."""

    id: str
    name: str
    category: str
    created_at: datetime
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    description: Optional[str] = None
    due_date: Optional[date] = None

    def __str__(self) -> str:
        """String representation."""
        status = "✓" if self.completed else "○"
        return f"{status} {self.name} [{self.priority.value}/{self.category}]"

    def to_dict(self) -> dict:
        """Convert to the persisted dictionary shape."""
        data = {
            'id': self.id,
            'name': self.name,
            'priority': self.priority.value,
            'category': self.category,
            'completed': self.completed,
            'createdAt': format_instant(self.created_at),
        }
        if self.description is not None:
            data['description'] = self.description
        if self.due_date is not None:
            data['dueDate'] = self.due_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Task':
        """Create from the persisted dictionary shape."""
        due_date = data.get('dueDate')
        return cls(
            id=data['id'],
            name=data['name'],
            category=data.get('category', 'Other'),
            created_at=parse_instant(data.get('createdAt')) or datetime.now(),
            priority=Priority(data.get('priority', 'medium')),
            completed=bool(data.get('completed', False)),
            description=data.get('description'),
            due_date=date.fromisoformat(due_date) if due_date else None
        )


@dataclass
class Reminder:
    """Reminder data model."""

    id: str
    task_id: str
    time: str  # "HH:MM", 24-hour
    sound: bool = True
    vibration: bool = True
    snooze: bool = True
    repeat: RepeatPolicy = RepeatPolicy.NONE
    days: Optional[List[bool]] = None  # Sunday=0 .. Saturday=6
    enabled: bool = True
    triggered_at: Optional[datetime] = None

    def __str__(self) -> str:
        """String representation."""
        status = "●" if self.enabled else "○"
        return f"{status} reminder {self.id} @ {self.time} ({self.repeat.value})"

    def to_dict(self) -> dict:
        """Convert to the persisted dictionary shape."""
        data = {
            'id': self.id,
            'taskId': self.task_id,
            'time': self.time,
            'sound': self.sound,
            'vibration': self.vibration,
            'snooze': self.snooze,
            'repeat': self.repeat.value,
            'enabled': self.enabled,
        }
        if self.days is not None:
            data['days'] = list(self.days)
        if self.triggered_at is not None:
            data['triggeredAt'] = format_instant(self.triggered_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Reminder':
        """Create from the persisted dictionary shape."""
        days = data.get('days')
        return cls(
            id=data['id'],
            task_id=data.get('taskId', ''),
            time=data['time'],
            sound=bool(data.get('sound', True)),
            vibration=bool(data.get('vibration', True)),
            snooze=bool(data.get('snooze', True)),
            repeat=RepeatPolicy(data.get('repeat', 'none')),
            days=[bool(d) for d in days] if isinstance(days, list) else None,
            enabled=bool(data.get('enabled', True)),
            triggered_at=parse_instant(data.get('triggeredAt'))
        )


@dataclass
class ProductivityData:
    """Per-day productivity aggregate."""

    date: date
    completed_tasks: int = 0
    focus_minutes: int = 0

    def to_dict(self) -> dict:
        """Convert to the persisted dictionary shape."""
        return {
            'date': self.date.isoformat(),
            'completedTasks': self.completed_tasks,
            'focusMinutes': self.focus_minutes
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ProductivityData':
        """Create from the persisted dictionary shape."""
        return cls(
            date=date.fromisoformat(data['date']),
            completed_tasks=int(data.get('completedTasks', 0)),
            focus_minutes=int(data.get('focusMinutes', 0))
        )


@dataclass
class ActiveAlarm:
    """The single alarm currently presented on the notification surface."""

    reminder: Reminder
    task_name: Optional[str] = None
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def display_name(self) -> str:
        """Task name, or a placeholder when the task no longer exists."""
        return self.task_name if self.task_name is not None else settings.UNKNOWN_TASK_NAME
