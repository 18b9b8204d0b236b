"""
Alarm session controller.
Promotes due reminders to the single active alarm, drives the sound and
vibration side effects, and turns dismiss/snooze into reminder-store writes.
"""

import asyncio
from datetime import timedelta
from typing import Callable, Optional

from config.logging_config import get_logger
from config import settings
from config.settings import AlarmState, EventType
from src.alarm.clock import SystemClock
from src.alarm.evaluator import evaluate, format_clock_time
from src.core.event_bus import EventBus
from src.core.state_machine import AlarmStateTracker
from src.reminder.models import ActiveAlarm, Reminder, RepeatPolicy
from src.reminder.repository import ReminderRepository

logger = get_logger(__name__)


class AlarmController:
    """
    Decides, once per tick, whether an alarm should go off.

    Only one alarm is active at a time. Other reminders due in the same
    minute wait: once the active alarm is resolved the controller evaluates
    again straight away, so they still fire within their minute.
    """

    def __init__(self, reminders: ReminderRepository, tasks=None, clock=None,
                 sound=None, vibrator=None, event_bus: Optional[EventBus] = None):
        """
        Initialize controller.

        Args:
            reminders: Reminder store
            tasks: Task lookup with get_by_id(task_id) (optional)
            clock: Time source with now() (default: system clock)
            sound: Alarm sound with start()/stop() (optional)
            vibrator: Vibration device with async vibrate(pattern)/stop() (optional)
            event_bus: Event bus for alarm events (optional)
        """
        self.reminders = reminders
        self.tasks = tasks
        self.clock = clock or SystemClock()
        self.sound = sound
        self.vibrator = vibrator
        self.event_bus = event_bus

        self.state = AlarmStateTracker(event_bus)
        self.active_alarm: Optional[ActiveAlarm] = None

        # Called after the active alarm resolves
        self.on_resolved: Optional[Callable] = None

    @property
    def active_id(self) -> Optional[str]:
        """ID of the active reminder, if any."""
        return self.state.active_id

    def set_resolved_callback(self, callback: Callable) -> None:
        """
        Set a callback run after every dismiss or snooze.

        Args:
            callback: Zero-argument function
        """
        self.on_resolved = callback

    async def tick(self) -> Optional[ActiveAlarm]:
        """
        Evaluate the reminder store once.

        Returns:
            The newly activated alarm, or None
        """
        if self.state.has_active():
            logger.debug(f"Alarm {self.active_id} still active, skipping evaluation")
            return None

        now = self.clock.now()

        try:
            snapshot = self.reminders.get_all()
        except Exception as e:
            logger.error(f"Failed to read reminders: {e}", exc_info=True)
            await self._publish(EventType.ERROR_OCCURRED, {'error': str(e)})
            return None

        due = evaluate(now, snapshot)
        if not due:
            return None

        for reminder in due:
            await self.state.transition(reminder.id, AlarmState.DUE)

        first = due[0]
        await self.state.transition(first.id, AlarmState.ACTIVE)

        for reminder in due[1:]:
            logger.info(f"Reminder {reminder.id} is due but alarm {first.id} goes first")
            await self.state.transition(reminder.id, AlarmState.IDLE)

        alarm = ActiveAlarm(
            reminder=first,
            task_name=self._lookup_task_name(first),
            started_at=now
        )
        self.active_alarm = alarm

        logger.info(f"Alarm triggered: {alarm.display_name} at {first.time} ({first.id})")

        await self._start_effects(first)
        await self._publish(EventType.ALARM_TRIGGERED, {'alarm': alarm})

        return alarm

    async def dismiss(self, reminder_id: str) -> bool:
        """
        Dismiss the active alarm.
        Records the firing; one-shot reminders are disabled for good.

        Args:
            reminder_id: ID of the active reminder

        Returns:
            True if the reminder store was updated
        """
        if not self._is_active(reminder_id, "dismiss"):
            return False

        now = self.clock.now()
        await self._stop_effects()

        reminder = self.reminders.get_by_id(reminder_id)
        written = False

        if reminder is None:
            logger.warning(f"Active reminder {reminder_id} no longer exists, nothing to record")
        else:
            reminder.triggered_at = now.replace(microsecond=0)
            reminder.enabled = reminder.repeat is not RepeatPolicy.NONE
            written = self.reminders.update(reminder)

            logger.info(
                f"Alarm dismissed: {reminder_id} "
                f"({'stays enabled' if reminder.enabled else 'disabled'})"
            )

        await self._resolve(reminder_id, EventType.ALARM_DISMISSED, reminder)
        return written

    async def snooze(self, reminder_id: str) -> bool:
        """
        Snooze the active alarm for SNOOZE_MINUTES.
        Moves the reminder's time of day and clears its watermark.

        Args:
            reminder_id: ID of the active reminder

        Returns:
            True if the reminder store was updated
        """
        if not self._is_active(reminder_id, "snooze"):
            return False

        if not self.active_alarm.reminder.snooze:
            logger.warning(f"Reminder {reminder_id} does not allow snoozing")
            return False

        now = self.clock.now()
        await self._stop_effects()

        reminder = self.reminders.get_by_id(reminder_id)
        written = False

        if reminder is None:
            logger.warning(f"Active reminder {reminder_id} no longer exists, nothing to snooze")
        else:
            reminder.time = format_clock_time(now + timedelta(minutes=settings.SNOOZE_MINUTES))
            reminder.triggered_at = None
            written = self.reminders.update(reminder)

            logger.info(f"Alarm snoozed: {reminder_id} until {reminder.time}")

        await self._resolve(reminder_id, EventType.ALARM_SNOOZED, reminder)
        return written

    async def shutdown(self) -> None:
        """Silence any active alarm and drop it without touching the store."""
        await self._stop_effects()

        if self.active_alarm is not None:
            logger.info(f"Dropping active alarm {self.active_id} on shutdown")

        self.active_alarm = None
        await self.state.reset()

    def _is_active(self, reminder_id: str, action: str) -> bool:
        if self.active_alarm is None:
            logger.warning(f"Cannot {action} {reminder_id}: no alarm is active")
            return False

        if self.active_id != reminder_id:
            logger.warning(
                f"Cannot {action} {reminder_id}: active alarm is {self.active_id}"
            )
            return False

        return True

    async def _resolve(self, reminder_id: str, event_type: EventType,
                       reminder: Optional[Reminder]) -> None:
        """Free the active slot, then look for the next due reminder."""
        await self.state.transition(reminder_id, AlarmState.RESOLVED)
        self.active_alarm = None
        await self.state.transition(reminder_id, AlarmState.IDLE)

        await self._publish(event_type, {'reminder_id': reminder_id, 'reminder': reminder})

        await self.tick()

        if self.on_resolved:
            try:
                self.on_resolved()
            except Exception as e:
                logger.error(f"Error in resolved callback: {e}", exc_info=True)

    def _lookup_task_name(self, reminder: Reminder) -> Optional[str]:
        if self.tasks is None:
            return None

        try:
            task = self.tasks.get_by_id(reminder.task_id)
        except Exception as e:
            logger.error(f"Task lookup failed for reminder {reminder.id}: {e}", exc_info=True)
            return None

        if task is None:
            logger.debug(f"Task {reminder.task_id} of reminder {reminder.id} not found")
            return None

        return task.name

    async def _start_effects(self, reminder: Reminder) -> None:
        """Sound and vibration. Failures are logged; the alarm stays active."""
        if reminder.sound and self.sound is not None:
            try:
                # Opening the output stream can block
                if not await asyncio.to_thread(self.sound.start):
                    logger.warning(f"Alarm sound did not start for {reminder.id}")
            except Exception as e:
                logger.error(f"Error starting alarm sound: {e}", exc_info=True)

        if reminder.vibration and self.vibrator is not None:
            try:
                await self.vibrator.vibrate(settings.VIBRATION_PATTERN_MS)
            except Exception as e:
                logger.error(f"Error starting vibration: {e}", exc_info=True)

    async def _stop_effects(self) -> None:
        if self.sound is not None:
            try:
                await asyncio.to_thread(self.sound.stop)
            except Exception as e:
                logger.error(f"Error stopping alarm sound: {e}", exc_info=True)

        if self.vibrator is not None:
            try:
                self.vibrator.stop()
            except Exception as e:
                logger.error(f"Error stopping vibration: {e}", exc_info=True)

    async def _publish(self, event_type: EventType, data: dict) -> None:
        if self.event_bus:
            await self.event_bus.publish(event_type, data)
