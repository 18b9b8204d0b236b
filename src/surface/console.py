"""
Console notification surface.
Shows the active alarm and forwards dismiss/snooze from stdin to the session.
Holds no scheduling logic of its own.
"""

import asyncio
import sys
import threading
from typing import Optional, TextIO

from config.logging_config import get_logger
from config import settings
from config.settings import EventType
from src.alarm.session import AlarmSession
from src.reminder.models import ActiveAlarm

logger = get_logger(__name__)

HELP_TEXT = "Commands: [d] dismiss, [s] snooze, [q] quit"


def render_alarm(alarm: ActiveAlarm) -> str:
    """
    Text shown for an active alarm.

    Args:
        alarm: The active alarm

    Returns:
        Multi-line notification text
    """
    options = []
    if alarm.reminder.snooze:
        options.append(f"[s] Snooze ({settings.SNOOZE_MINUTES} min)")
    options.append("[d] Dismiss")

    return "\n".join([
        "Reminder!",
        alarm.display_name,
        f"It's {alarm.reminder.time}! Time to focus.",
        "  ".join(options)
    ])


class ConsoleNotifier:
    """
    Renders alarms to a text stream and reads single-letter commands.
    """

    def __init__(self, session: AlarmSession, output: TextIO = None):
        """
        Initialize notifier.

        Args:
            session: Alarm session to forward commands to
            output: Stream to write to (default stdout)
        """
        self.session = session
        self.output = output or sys.stdout
        self.quit_requested = asyncio.Event()
        self.workers = []

    def write(self, text: str) -> None:
        self.output.write(text + "\n")
        self.output.flush()

    async def handle_command(self, command: str) -> bool:
        """
        Apply one command line.

        Args:
            command: Raw input line

        Returns:
            True if the command was understood
        """
        command = command.strip().lower()
        alarm = self.session.active_alarm

        if command in ("q", "quit"):
            self.quit_requested.set()
            return True

        if command in ("d", "dismiss", "s", "snooze"):
            if alarm is None:
                self.write("No active alarm.")
                return True

            if command.startswith("d"):
                await self.session.dismiss(alarm.reminder.id)
                self.write("Dismissed.")
            elif alarm.reminder.snooze:
                await self.session.snooze(alarm.reminder.id)
                self.write(f"Snoozed for {settings.SNOOZE_MINUTES} minutes.")
            else:
                self.write("This reminder cannot be snoozed.")
            return True

        if command:
            self.write(HELP_TEXT)
        return False

    async def run(self) -> None:
        """Show alarms and process input until quit is requested."""
        queue = await self.session.event_bus.subscribe(EventType.ALARM_TRIGGERED)

        self.workers = [
            asyncio.create_task(self._show_alarms(queue)),
            asyncio.create_task(self._read_commands())
        ]
        self.write(HELP_TEXT)

        try:
            await self.quit_requested.wait()
        finally:
            for task in self.workers:
                task.cancel()
            await asyncio.gather(*self.workers, return_exceptions=True)
            await self.session.event_bus.unsubscribe(queue, EventType.ALARM_TRIGGERED)

    async def _show_alarms(self, queue: asyncio.Queue) -> None:
        while True:
            event = await queue.get()
            alarm: Optional[ActiveAlarm] = event.data.get('alarm')
            if alarm is not None:
                self.write("")
                self.write(render_alarm(alarm))

    async def _read_commands(self) -> None:
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue = asyncio.Queue()

        def reader() -> None:
            try:
                for line in sys.stdin:
                    loop.call_soon_threadsafe(lines.put_nowait, line)
                loop.call_soon_threadsafe(lines.put_nowait, None)
            except RuntimeError:
                # Event loop already closed
                pass

        # Daemon thread so a pending readline never blocks interpreter exit
        threading.Thread(target=reader, name="console-input", daemon=True).start()

        while True:
            line = await lines.get()
            if line is None:
                logger.debug("Input closed, console commands disabled")
                return
            await self.handle_command(line)
