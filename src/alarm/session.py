"""
Alarm session lifecycle.
Acquires the polling timer and the sound/vibration devices together and
releases them together on every exit path.
"""

import asyncio
from typing import Optional

from config.logging_config import get_logger
from config.settings import EventType
from src.alarm.controller import AlarmController
from src.core.event_bus import EventBus
from src.reminder.models import ActiveAlarm
from src.reminder.repository import ReminderRepository
from src.reminder.scheduler import ReminderScheduler

logger = get_logger(__name__)


class AlarmSession:
    """
    One active alarm session.

    Usage:
        async with AlarmSession(reminders, tasks, sound=..., vibrator=...) as session:
            ...
    """

    def __init__(self, reminders: ReminderRepository, tasks=None, clock=None,
                 sound=None, vibrator=None, event_bus: Optional[EventBus] = None,
                 poll_interval: float = None):
        """
        Initialize session.

        Args:
            reminders: Reminder store
            tasks: Task lookup for display names (optional)
            clock: Time source (default: system clock)
            sound: Alarm sound with start()/stop()/cleanup() (optional)
            vibrator: Vibration device with vibrate()/stop()/cleanup() (optional)
            event_bus: Event bus shared with the notification surface
            poll_interval: Seconds between ticks (default from settings)
        """
        self.event_bus = event_bus or EventBus()
        self.sound = sound
        self.vibrator = vibrator

        self.controller = AlarmController(
            reminders=reminders,
            tasks=tasks,
            clock=clock,
            sound=sound,
            vibrator=vibrator,
            event_bus=self.event_bus
        )
        self.scheduler = ReminderScheduler(poll_interval)
        self.running = False

    @property
    def active_alarm(self) -> Optional[ActiveAlarm]:
        return self.controller.active_alarm

    async def start(self) -> None:
        """Start polling. The first evaluation happens immediately."""
        if self.running:
            logger.warning("Alarm session already running")
            return

        self.controller.set_resolved_callback(self.scheduler.rearm)
        self.scheduler.start(self.controller.tick)
        self.running = True

        await self.event_bus.publish(EventType.SESSION_STARTED)
        logger.info("Alarm session started")

    async def stop(self) -> None:
        """Stop polling, silence any alarm and release devices."""
        was_running = self.running
        self.running = False

        try:
            self.scheduler.shutdown()
        finally:
            try:
                await self.controller.shutdown()
            finally:
                await self._release_devices()

        if was_running:
            await self.event_bus.publish(EventType.SESSION_STOPPED)
            logger.info("Alarm session stopped")

    async def __aenter__(self) -> 'AlarmSession':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def dismiss(self, reminder_id: str) -> bool:
        """Dismiss the active alarm (see AlarmController.dismiss)."""
        return await self.controller.dismiss(reminder_id)

    async def snooze(self, reminder_id: str) -> bool:
        """Snooze the active alarm (see AlarmController.snooze)."""
        return await self.controller.snooze(reminder_id)

    async def notify_reminders_changed(self) -> None:
        """
        Tell the session the reminder set was edited.
        Evaluates right away and restarts the polling interval.
        """
        await self.event_bus.publish(EventType.REMINDERS_CHANGED)

        if not self.running:
            return

        await self.controller.tick()
        self.scheduler.rearm()

    async def _release_devices(self) -> None:
        if self.sound is not None:
            try:
                # Joins the playback thread
                await asyncio.to_thread(self.sound.cleanup)
            except Exception as e:
                logger.error(f"Error releasing alarm sound: {e}", exc_info=True)

        if self.vibrator is not None:
            try:
                self.vibrator.cleanup()
            except Exception as e:
                logger.error(f"Error releasing vibration motor: {e}", exc_info=True)
