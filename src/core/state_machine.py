"""
Per-reminder alarm state machine.
Tracks Idle/Due/Active/Resolved for every reminder and holds the single
active reminder slot.
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from config.logging_config import get_logger
from config.settings import AlarmState, EventType
from src.core.event_bus import EventBus

logger = get_logger(__name__)


class AlarmStateTracker:
    """
    Validated alarm state transitions with history tracking.
    At most one reminder may be ACTIVE; `active_id` names it.
    Emits ALARM_STATE_CHANGED events on transitions.
    """

    # Valid state transitions (from_state -> list of valid to_states)
    VALID_TRANSITIONS = {
        AlarmState.IDLE: [AlarmState.DUE],
        AlarmState.DUE: [AlarmState.ACTIVE, AlarmState.IDLE],
        AlarmState.ACTIVE: [AlarmState.RESOLVED],
        AlarmState.RESOLVED: [AlarmState.IDLE],
    }

    def __init__(self, event_bus: Optional[EventBus] = None):
        """
        Initialize tracker.

        Args:
            event_bus: Event bus for publishing state changes (optional)
        """
        self.event_bus = event_bus
        self.active_id: Optional[str] = None

        # Reminders not listed here are IDLE
        self.states: Dict[str, AlarmState] = {}

        # State history for debugging (keep last 100 transitions)
        self.history: List[Tuple[str, AlarmState, AlarmState, datetime]] = []
        self.max_history = 100

    async def transition(self, reminder_id: str, new_state: AlarmState,
                         force: bool = False) -> bool:
        """
        Move a reminder to a new state.

        Args:
            reminder_id: Reminder ID
            new_state: Target state
            force: If True, skip validation (use with caution)

        Returns:
            True if transition successful, False if invalid
        """
        old_state = self.get_state(reminder_id)

        if old_state == new_state:
            return True

        if not force:
            if new_state not in self.VALID_TRANSITIONS[old_state]:
                logger.warning(
                    f"Invalid transition for {reminder_id}: "
                    f"{old_state.value} -> {new_state.value}"
                )
                return False

            if new_state is AlarmState.ACTIVE and self.active_id is not None:
                logger.warning(
                    f"Cannot activate {reminder_id}: {self.active_id} is already active"
                )
                return False

        if new_state is AlarmState.ACTIVE:
            self.active_id = reminder_id
        elif self.active_id == reminder_id:
            self.active_id = None

        if new_state is AlarmState.IDLE:
            self.states.pop(reminder_id, None)
        else:
            self.states[reminder_id] = new_state

        self.history.append((reminder_id, old_state, new_state, datetime.now()))
        if len(self.history) > self.max_history:
            self.history.pop(0)

        logger.debug(f"Reminder {reminder_id}: {old_state.value} -> {new_state.value}")

        if self.event_bus:
            await self.event_bus.publish(
                EventType.ALARM_STATE_CHANGED,
                {
                    'reminder_id': reminder_id,
                    'old_state': old_state,
                    'new_state': new_state
                }
            )

        return True

    def get_state(self, reminder_id: str) -> AlarmState:
        """Get a reminder's current state."""
        return self.states.get(reminder_id, AlarmState.IDLE)

    def has_active(self) -> bool:
        """Check whether an alarm is currently active."""
        return self.active_id is not None

    def get_history(self, limit: int = 10) -> List[Tuple[str, AlarmState, AlarmState, datetime]]:
        """
        Get recent transition history.

        Args:
            limit: Number of recent transitions to return

        Returns:
            List of (reminder_id, from_state, to_state, timestamp) tuples
        """
        return self.history[-limit:]

    async def reset(self) -> None:
        """Force every tracked reminder back to IDLE."""
        for reminder_id in list(self.states):
            await self.transition(reminder_id, AlarmState.IDLE, force=True)
        self.active_id = None
        logger.debug("Alarm states reset to IDLE")
