"""
Main entry point for the Productivity Hub alarm engine.
Handles CLI arguments, environment setup, and the alarm session lifecycle.
"""

import asyncio
import signal
import sys
import argparse
from pathlib import Path

from config.logging_config import setup_logging
from config import settings
from src.alarm.session import AlarmSession
from src.audio.alarm_sound import AlarmSound
from src.hardware.vibration import VibrationMotor
from src.planner.repository import TaskRepository
from src.planner.snapshot import load_snapshot, save_snapshot
from src.reminder.repository import ReminderRepository
from src.surface.console import ConsoleNotifier

# Setup logging first
logger = setup_logging()


def parse_arguments(argv=None):
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Productivity Hub - reminder alarms for your tasks"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"SQLite database path (default: {settings.DB_PATH})"
    )

    parser.add_argument(
        "--import",
        dest="import_path",
        type=Path,
        default=None,
        help="Import a JSON snapshot (tasks, reminders, productivityData) before starting"
    )

    parser.add_argument(
        "--export",
        dest="export_path",
        type=Path,
        default=None,
        help="Write a JSON snapshot of all data and exit"
    )

    parser.add_argument(
        "--no-sound",
        action="store_true",
        help="Never play the alarm tone"
    )

    return parser.parse_args(argv)


def load_environment() -> None:
    """Report where the .env overrides came from (they are applied by config.settings)."""
    if settings.ENV_LOADED:
        logger.info(f"Loaded environment from {settings.ENV_FILE}")
    else:
        logger.debug(f"No .env values loaded from {settings.ENV_FILE}")


async def main(argv=None) -> int:
    """Main application entry point."""
    args = parse_arguments(argv)

    if args.debug:
        logger.setLevel("DEBUG")
        for handler in logger.handlers:
            handler.setLevel("DEBUG")
        logger.info("Debug logging enabled")

    load_environment()

    db_path = str(args.db) if args.db else None
    reminders = ReminderRepository(db_path)
    tasks = TaskRepository(db_path, reminders=reminders)

    if args.import_path:
        load_snapshot(args.import_path, tasks)

    if args.export_path:
        save_snapshot(args.export_path, tasks)
        return 0

    session = AlarmSession(
        reminders=reminders,
        tasks=tasks,
        sound=AlarmSound(enabled=not args.no_sound),
        vibrator=VibrationMotor()
    )
    notifier = ConsoleNotifier(session)

    # Setup signal handlers for graceful shutdown
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, notifier.quit_requested.set)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            pass

    logger.info("=" * 60)
    logger.info("Productivity Hub alarms")
    logger.info("=" * 60)
    logger.info(f"Watching {len(reminders.get_all())} reminders")

    async with session:
        await notifier.run()

    logger.info("Application stopped")
    return 0


def run() -> None:
    """Console script entry point."""
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)

    except Exception as e:
        logger.error(f"Fatal error in main: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
