import asyncio

from config.settings import AlarmState, EventType
from src.core.event_bus import EventBus
from src.core.state_machine import AlarmStateTracker


def test_full_cycle_back_to_idle():
    tracker = AlarmStateTracker()

    async def scenario():
        for state in (AlarmState.DUE, AlarmState.ACTIVE, AlarmState.RESOLVED, AlarmState.IDLE):
            assert await tracker.transition("r1", state)

    asyncio.run(scenario())
    assert tracker.get_state("r1") is AlarmState.IDLE
    assert tracker.active_id is None
    assert len(tracker.get_history()) == 4


def test_invalid_transitions_rejected():
    tracker = AlarmStateTracker()

    async def scenario():
        skipped_due = await tracker.transition("r1", AlarmState.ACTIVE)
        await tracker.transition("r1", AlarmState.DUE)
        back_from_due = await tracker.transition("r1", AlarmState.RESOLVED)
        return skipped_due, back_from_due

    assert asyncio.run(scenario()) == (False, False)
    assert tracker.get_state("r1") is AlarmState.DUE


def test_single_active_slot():
    tracker = AlarmStateTracker()

    async def scenario():
        await tracker.transition("a", AlarmState.DUE)
        await tracker.transition("b", AlarmState.DUE)
        first = await tracker.transition("a", AlarmState.ACTIVE)
        second = await tracker.transition("b", AlarmState.ACTIVE)
        return first, second

    assert asyncio.run(scenario()) == (True, False)
    assert tracker.active_id == "a"
    assert tracker.has_active()


def test_state_changes_published():
    bus = EventBus()
    tracker = AlarmStateTracker(bus)

    async def scenario():
        queue = await bus.subscribe(EventType.ALARM_STATE_CHANGED)
        await tracker.transition("r1", AlarmState.DUE)
        return await queue.get()

    event = asyncio.run(scenario())
    assert event.data == {
        'reminder_id': "r1",
        'old_state': AlarmState.IDLE,
        'new_state': AlarmState.DUE
    }


def test_reset_clears_everything():
    tracker = AlarmStateTracker()

    async def scenario():
        await tracker.transition("a", AlarmState.DUE)
        await tracker.transition("a", AlarmState.ACTIVE)
        await tracker.reset()

    asyncio.run(scenario())
    assert tracker.active_id is None
    assert tracker.states == {}
