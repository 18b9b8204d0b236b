"""
Time sources for the alarm engine.
"""

from datetime import datetime, timedelta


class SystemClock:
    """Local wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


class ManualClock:
    """
    Clock that only moves when told to.
    Used to drive the engine deterministically.
    """

    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def set(self, instant: datetime) -> None:
        self.current = instant

    def advance(self, minutes: int = 0, seconds: int = 0) -> datetime:
        """Move the clock forward and return the new instant."""
        self.current += timedelta(minutes=minutes, seconds=seconds)
        return self.current
