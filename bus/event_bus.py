"""
EventBus: In-memory pub/sub for observable simulation events.

Supports:
    - Topic-based publishing with per-topic queues
    - Draining a topic with poll()
    - Synchronous subscribers invoked on publish
    - Logging of events

Intended usage:
    - The intersection engine publishes 'vehicle.added', 'vehicle.close_call'
      and 'vehicle.velocity'
    - Statistics sinks poll those topics between ticks; nothing on the bus
      ever feeds back into arbitration
"""

import logging
from typing import Callable, Dict, List, Optional

from .message import SimEvent
from .utils import new_msg_id

log = logging.getLogger(__name__)

TOPIC_VEHICLE_ADDED = "vehicle.added"
TOPIC_CLOSE_CALL = "vehicle.close_call"
TOPIC_VELOCITY = "vehicle.velocity"

Handler = Callable[[SimEvent], None]


class EventBus:
    """
    Transport layer for simulation events.

    Attributes:
        clock (Callable[[], float]): Source of the timestamp stamped on events.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Initialize an EventBus instance.

        Args:
            clock (Callable[[], float]): Returns the current simulated time.
                Defaults to a clock stuck at 0.0.
        """
        self._topics: Dict[str, List[SimEvent]] = {}
        self._subscribers: Dict[str, List[Handler]] = {}
        self.clock = clock or (lambda: 0.0)
        self.published = 0

    def publish(self, topic: str, sender: str, payload: dict) -> str:
        """
        Publish an event to a specific topic.

        Args:
            topic (str): The topic name (e.g., 'vehicle.added').
            sender (str): ID of the emitting component.
            payload (dict): Arbitrary data dictionary representing the event contents.

        Returns:
            str: The unique event ID.
        """
        msg = SimEvent(
            id=new_msg_id(topic),
            topic=topic,
            sender=sender,
            payload=payload,
            ts=self.clock(),
        )
        self._topics.setdefault(topic, []).append(msg)
        self.published += 1

        for handler in self._subscribers.get(topic, []):
            handler(msg)

        log.debug("publish topic=%s sender=%s id=%s", topic, sender, msg.id)
        return msg.id

    def poll(self, topic: str) -> List[SimEvent]:
        """
        Retrieve and clear all events from a given topic.

        Args:
            topic (str): The topic name to poll events from.

        Returns:
            List[SimEvent]: Events published to the topic since the last poll.
        """
        msgs = self._topics.get(topic, [])
        self._topics[topic] = []
        return msgs

    def subscribe(self, topic: str, handler: Handler):
        """
        Register a handler invoked synchronously for every event on a topic.

        Args:
            topic (str): The topic name.
            handler (Callable[[SimEvent], None]): Callback receiving the event.
        """
        self._subscribers.setdefault(topic, []).append(handler)

    def pending(self, topic: str) -> int:
        """
        Number of events queued on a topic and not yet polled.

        Args:
            topic (str): The topic name.

        Returns:
            int: Queue length.
        """
        return len(self._topics.get(topic, []))

    def clear(self):
        """
        Drop every queued event; subscribers stay registered.
        """
        self._topics.clear()
