"""
Event bus for pub/sub messaging between the alarm engine and its surfaces.
The engine publishes alarm events; notification surfaces subscribe to them.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from config.logging_config import get_logger
from config.settings import EventType

logger = get_logger(__name__)


@dataclass
class Event:
    """Event data structure."""
    event_type: EventType
    data: Any = None
    timestamp: datetime = field(default_factory=datetime.now)


class EventBus:
    """
    Asynchronous event bus using pub/sub pattern.
    Each subscriber gets its own bounded queue; a full queue drops the event
    for that subscriber only.
    """

    def __init__(self):
        """Initialize the event bus."""
        self.subscribers: Dict[EventType, List[asyncio.Queue]] = {}
        self.all_subscribers: List[asyncio.Queue] = []  # Subscribed to every event type
        self.lock = asyncio.Lock()
        logger.debug("EventBus initialized")

    async def subscribe(self, event_type: Optional[EventType] = None,
                        queue_size: int = 100) -> asyncio.Queue:
        """
        Subscribe to events.

        Args:
            event_type: Specific event type to subscribe to (None = all events)
            queue_size: Maximum queue size for buffering

        Returns:
            Queue that will receive events
        """
        queue = asyncio.Queue(maxsize=queue_size)

        async with self.lock:
            if event_type is None:
                self.all_subscribers.append(queue)
            else:
                self.subscribers.setdefault(event_type, []).append(queue)

        logger.debug(f"Subscriber added for {event_type.value if event_type else 'ALL'} events")
        return queue

    async def unsubscribe(self, queue: asyncio.Queue,
                          event_type: Optional[EventType] = None) -> None:
        """
        Unsubscribe from events.

        Args:
            queue: Queue to remove
            event_type: Event type to unsubscribe from (None = all)
        """
        async with self.lock:
            if event_type is None:
                targets = self.all_subscribers
            else:
                targets = self.subscribers.get(event_type, [])

            if queue in targets:
                targets.remove(queue)
                logger.debug(f"Subscriber removed from {event_type.value if event_type else 'ALL'} events")

    async def publish(self, event_type: EventType, data: Any = None) -> int:
        """
        Publish an event to all subscribers.

        Args:
            event_type: Type of event
            data: Event data payload

        Returns:
            Number of subscribers the event was delivered to
        """
        event = Event(event_type=event_type, data=data)

        async with self.lock:
            target_queues = list(self.subscribers.get(event_type, []))
            target_queues.extend(self.all_subscribers)

        delivered = 0
        for q in target_queues:
            try:
                q.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(
                    f"Subscriber queue full for {event_type.value}, "
                    "dropping event (slow subscriber)"
                )

        logger.debug(f"Published {event_type.value} to {delivered} subscriber(s)")
        return delivered
