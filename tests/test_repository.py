import json
from datetime import date, datetime

from src.planner.repository import ProductivityRepository
from src.planner.snapshot import load_snapshot, save_snapshot
from src.reminder.models import Priority, RepeatPolicy

from conftest import make_reminder


def test_reminder_crud_keeps_insertion_order(reminders):
    first = reminders.create("t1", "08:00", repeat=RepeatPolicy.DAILY)
    second = reminders.create("t2", "07:00")
    third = reminders.create("t1", "06:00", repeat=RepeatPolicy.CUSTOM,
                             days=[True, False, False, False, False, False, True])

    assert [r.id for r in reminders.get_all()] == [first.id, second.id, third.id]
    assert [r.id for r in reminders.get_for_task("t1")] == [first.id, third.id]

    loaded = reminders.get_by_id(third.id)
    assert loaded.days == [True, False, False, False, False, False, True]
    assert loaded.repeat is RepeatPolicy.CUSTOM

    loaded.time = "06:30"
    loaded.triggered_at = datetime(2025, 1, 6, 6, 30, 12)
    assert reminders.update(loaded)
    assert reminders.get_by_id(third.id).triggered_at == datetime(2025, 1, 6, 6, 30, 12)
    # Updates keep the position
    assert reminders.get_all()[2].id == third.id

    assert reminders.delete(second.id)
    assert not reminders.delete(second.id)
    assert reminders.get_by_id(second.id) is None


def test_update_missing_reminder(reminders):
    assert reminders.update(make_reminder("ghost")) is False


def test_import_skips_malformed_records(reminders):
    records = [
        {"id": "ok", "taskId": "t1", "time": "09:00", "sound": True, "vibration": False,
         "snooze": True, "repeat": "daily", "enabled": True},
        {"id": "bad-repeat", "taskId": "t1", "time": "09:00", "repeat": "weekly"},
        {"taskId": "no-id", "time": "09:00"},
    ]
    assert reminders.import_records(records) == 1
    assert reminders.export_records() == [records[0]]


def test_task_delete_cascades_to_reminders(tasks, reminders):
    task = tasks.create("Laundry", category="Personal", priority=Priority.LOW)
    other = tasks.create("Gym", category="Health")
    reminders.create(task.id, "10:00")
    reminders.create(task.id, "18:00", repeat=RepeatPolicy.DAILY)
    kept = reminders.create(other.id, "07:00")

    assert tasks.delete(task.id)
    assert tasks.get_by_id(task.id) is None
    assert [r.id for r in reminders.get_all()] == [kept.id]


def test_task_update_and_toggle_records_productivity(tasks):
    task = tasks.create("Read chapter", category="Study", due_date=date(2025, 2, 1))
    task.name = "Read two chapters"
    task.priority = Priority.HIGH
    assert tasks.update(task)

    loaded = tasks.get_by_id(task.id)
    assert loaded.name == "Read two chapters"
    assert loaded.priority is Priority.HIGH
    assert loaded.due_date == date(2025, 2, 1)

    assert tasks.toggle_complete(task.id).completed is True
    assert tasks.toggle_complete(task.id).completed is False
    assert tasks.toggle_complete(task.id).completed is True
    assert tasks.toggle_complete("missing") is None

    today = tasks.productivity.get_day(date.today())
    assert today.completed_tasks == 2


def test_productivity_accumulates_per_day(db_path):
    productivity = ProductivityRepository(db_path)
    day = date(2025, 1, 6)

    productivity.add_focus_minutes(25, day)
    productivity.add_focus_minutes(25, day)
    productivity.record_completed_task(day)

    data = productivity.get_day(day)
    assert (data.completed_tasks, data.focus_minutes) == (1, 50)
    assert productivity.get_day(date(2025, 1, 7)) is None
    assert productivity.export_records() == [
        {"date": "2025-01-06", "completedTasks": 1, "focusMinutes": 50}
    ]


def test_snapshot_round_trip(tmp_path, tasks, reminders):
    source = {
        "tasks": [
            {"id": "t1", "name": "Plan week", "priority": "high", "category": "Work",
             "completed": False, "createdAt": "2025-01-05T18:00:00"},
        ],
        "reminders": [
            {"id": "r1", "taskId": "t1", "time": "09:00", "sound": True, "vibration": True,
             "snooze": False, "repeat": "custom",
             "days": [False, True, True, True, True, True, False], "enabled": True},
        ],
        "productivityData": [
            {"date": "2025-01-05", "completedTasks": 3, "focusMinutes": 75},
        ],
    }
    source_path = tmp_path / "in.json"
    source_path.write_text(json.dumps(source))

    counts = load_snapshot(source_path, tasks)
    assert counts == {"tasks": 1, "reminders": 1, "productivityData": 1}

    out_path = tmp_path / "out.json"
    save_snapshot(out_path, tasks)
    assert json.loads(out_path.read_text()) == source


def test_snapshot_with_null_or_scalar_sections(tmp_path, tasks, reminders, caplog):
    source = {
        "tasks": [
            {"id": "t1", "name": "Plan week", "priority": "high", "category": "Work",
             "completed": False, "createdAt": "2025-01-05T18:00:00"},
        ],
        "reminders": None,
        "productivityData": "not a list",
    }
    source_path = tmp_path / "in.json"
    source_path.write_text(json.dumps(source))

    counts = load_snapshot(source_path, tasks)

    assert counts == {"tasks": 1, "reminders": 0, "productivityData": 0}
    assert reminders.get_all() == []
    assert "Ignoring snapshot section 'productivityData'" in caplog.text


def test_snapshot_skips_non_object_records(tmp_path, tasks, reminders):
    source = {
        "reminders": [
            "r1",
            ["09:00"],
            {"id": "r2", "taskId": "t1", "time": "10:30", "repeat": "none"},
        ],
    }
    source_path = tmp_path / "in.json"
    source_path.write_text(json.dumps(source))

    counts = load_snapshot(source_path, tasks)

    assert counts["reminders"] == 1
    assert [r.id for r in reminders.get_all()] == ["r2"]
