from datetime import date, datetime, timezone

from src.reminder.models import ActiveAlarm, ProductivityData, Reminder, RepeatPolicy, Task, parse_instant


def test_reminder_persisted_shape():
    reminder = Reminder(
        id="r1", task_id="t1", time="07:30", sound=False, vibration=True, snooze=True,
        repeat=RepeatPolicy.DAILY, enabled=True, triggered_at=datetime(2025, 1, 6, 7, 30, 5)
    )
    assert reminder.to_dict() == {
        "id": "r1",
        "taskId": "t1",
        "time": "07:30",
        "sound": False,
        "vibration": True,
        "snooze": True,
        "repeat": "daily",
        "enabled": True,
        "triggeredAt": "2025-01-06T07:30:05",
    }


def test_reminder_optional_fields_omitted():
    data = Reminder(id="r1", task_id="t1", time="07:30").to_dict()
    assert "days" not in data
    assert "triggeredAt" not in data


def test_reminder_from_browser_record():
    reminder = Reminder.from_dict({
        "id": "r1", "taskId": "t1", "time": "21:15", "sound": True, "vibration": False,
        "snooze": True, "repeat": "custom", "days": [1, 0, 0, 0, 0, 0, 1], "enabled": True,
        "triggeredAt": "2025-01-06T08:00:00.000Z",
    })
    assert reminder.repeat is RepeatPolicy.CUSTOM
    assert reminder.days == [True, False, False, False, False, False, True]
    expected = datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert reminder.triggered_at == expected


def test_parse_instant_naive_and_empty():
    assert parse_instant("2025-01-06T09:00:30") == datetime(2025, 1, 6, 9, 0, 30)
    assert parse_instant(None) is None
    assert parse_instant("") is None


def test_task_and_productivity_shapes():
    task = Task.from_dict({
        "id": "t1", "name": "Taxes", "description": "Q4", "dueDate": "2025-04-15",
        "priority": "high", "category": "Finance", "completed": False,
        "createdAt": "2025-01-01T10:00:00",
    })
    assert task.due_date == date(2025, 4, 15)
    assert task.to_dict()["dueDate"] == "2025-04-15"

    data = ProductivityData.from_dict({"date": "2025-01-06", "completedTasks": 2, "focusMinutes": 50})
    assert data.to_dict() == {"date": "2025-01-06", "completedTasks": 2, "focusMinutes": 50}


def test_active_alarm_placeholder_name():
    reminder = Reminder(id="r1", task_id="gone", time="09:00")
    assert ActiveAlarm(reminder).display_name == "Unknown Task"
    assert ActiveAlarm(reminder, task_name="Stretch").display_name == "Stretch"
