"""
Configuration settings for the Productivity Hub alarm engine.
All constants and configuration values centralized here.
"""

from enum import Enum
from pathlib import Path
import os

from dotenv import load_dotenv

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent

# Loaded before anything below reads os.environ; real environment wins
ENV_FILE = Path(os.getenv("PRODUCTIVITY_HUB_ENV_FILE", PROJECT_ROOT / ".env"))
ENV_LOADED = load_dotenv(ENV_FILE)

DATA_DIR = Path(os.getenv("PRODUCTIVITY_HUB_DATA_DIR", PROJECT_ROOT / "data"))
LOGS_DIR = Path(os.getenv("PRODUCTIVITY_HUB_LOG_DIR", PROJECT_ROOT / "logs"))
DB_PATH = DATA_DIR / "hub.db"

# Log file rotation
LOG_FILE_NAME = "productivity_hub.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)

# Polling Configuration
POLL_INTERVAL_SECONDS = 60  # One evaluation per minute boundary
POLL_JOB_ID = "alarm_poll"

# Alarm Behaviour
SNOOZE_MINUTES = 5
VIBRATION_PATTERN_MS = (200, 100, 200)  # on, off, on
UNKNOWN_TASK_NAME = "Unknown Task"

# Alarm Tone Configuration
ALARM_SAMPLE_RATE = 22050
ALARM_TONE_FREQUENCY = 880.0  # Hz
ALARM_BEEP_DURATION = 0.25  # Seconds
ALARM_PAUSE_DURATION = 0.15  # Seconds
ALARM_BEEP_COUNT = 3  # Beeps per loop iteration
ALARM_VOLUME = 0.6  # 0.0 to 1.0
OUTPUT_CHUNK_SIZE = 1024

# Vibration Motor Configuration
VIBRATION_GPIO_PIN = 27  # BCM pin numbering

# System Configuration
ENABLE_HARDWARE_GPIO = os.getenv("ENABLE_HARDWARE_GPIO", "false").lower() == "true"
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"


# Enums for type safety
class AlarmState(Enum):
    """Per-reminder alarm states."""
    IDLE = "idle"
    DUE = "due"
    ACTIVE = "active"
    RESOLVED = "resolved"


class EventType(Enum):
    """Event bus event types."""
    ALARM_TRIGGERED = "alarm_triggered"
    ALARM_DISMISSED = "alarm_dismissed"
    ALARM_SNOOZED = "alarm_snoozed"
    ALARM_STATE_CHANGED = "alarm_state_changed"
    REMINDERS_CHANGED = "reminders_changed"
    SESSION_STARTED = "session_started"
    SESSION_STOPPED = "session_stopped"
    ERROR_OCCURRED = "error_occurred"
