from datetime import datetime

import pytest

from src.planner.repository import TaskRepository
from src.reminder.models import Reminder, RepeatPolicy
from src.reminder.repository import ReminderRepository

# 2025-01-06 is a Monday
MONDAY_9AM = datetime(2025, 1, 6, 9, 0, 0)


class FakeSound:
    def __init__(self, fail=False, refuse=False):
        self.fail = fail
        self.refuse = refuse
        self.playing = False
        self.starts = 0
        self.stops = 0
        self.cleaned_up = False

    def start(self):
        self.starts += 1
        if self.fail:
            raise RuntimeError("autoplay blocked")
        if self.refuse:
            return False
        self.playing = True
        return True

    def stop(self):
        self.stops += 1
        self.playing = False

    def cleanup(self):
        self.stop()
        self.cleaned_up = True


class FakeVibrator:
    def __init__(self):
        self.patterns = []
        self.vibrating = False
        self.stops = 0
        self.cleaned_up = False

    async def vibrate(self, pattern):
        self.patterns.append(tuple(pattern))
        self.vibrating = True

    def stop(self):
        self.stops += 1
        self.vibrating = False

    def cleanup(self):
        self.stop()
        self.cleaned_up = True


def make_reminder(reminder_id="r1", time="09:00", repeat=RepeatPolicy.NONE, **kwargs):
    return Reminder(id=reminder_id, task_id=kwargs.pop("task_id", "t1"),
                    time=time, repeat=repeat, **kwargs)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "hub.db")


@pytest.fixture
def reminders(db_path):
    return ReminderRepository(db_path)


@pytest.fixture
def tasks(db_path, reminders):
    return TaskRepository(db_path, reminders=reminders)
