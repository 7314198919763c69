"""
SimulationStats: Running statistics fed by EventBus simulation events.
"""

from typing import Optional

from .event_bus import (
    TOPIC_CLOSE_CALL,
    TOPIC_VEHICLE_ADDED,
    TOPIC_VELOCITY,
    EventBus,
)
from .message import SimEvent


class SimulationStats:
    """
    Tracks totals for the end-of-run statistics screen.

    Attributes:
        num_cars (int): Vehicles ever added to the intersection.
        num_close (int): Close calls recorded.
        max_velocity (Optional[float]): Highest velocity observed (m/s).
        min_velocity (Optional[float]): Lowest velocity observed (m/s).
    """

    def __init__(self):
        """Initialize all counters to zero."""
        self.reset()

    def reset(self):
        """Forget everything observed so far."""
        self.num_cars = 0
        self.num_close = 0
        self.max_velocity: Optional[float] = None
        self.min_velocity: Optional[float] = None

    def consume(self, bus: EventBus) -> int:
        """
        Drain the statistics topics of a bus.

        Args:
            bus (EventBus): Bus the engine publishes to.

        Returns:
            int: Number of events consumed.
        """
        count = 0
        for topic in (TOPIC_VEHICLE_ADDED, TOPIC_CLOSE_CALL, TOPIC_VELOCITY):
            for msg in bus.poll(topic):
                self.observe(msg)
                count += 1
        return count

    def observe(self, msg: SimEvent):
        """
        Update the counters from one event.

        Args:
            msg (SimEvent): Event from one of the statistics topics.
        """
        if msg.topic == TOPIC_VEHICLE_ADDED:
            self.num_cars += 1
            if "velocity" in msg.payload:
                self.record_velocity(msg.payload["velocity"])
        elif msg.topic == TOPIC_CLOSE_CALL:
            self.num_close += 1
        elif msg.topic == TOPIC_VELOCITY:
            self.record_velocity(msg.payload["velocity"])

    def record_velocity(self, velocity: float):
        """
        Fold a velocity sample into the running min/max.

        Args:
            velocity (float): Observed velocity in m/s.
        """
        velocity = float(velocity)
        if self.max_velocity is None or velocity > self.max_velocity:
            self.max_velocity = velocity
        if self.min_velocity is None or velocity < self.min_velocity:
            self.min_velocity = velocity

    def report(self) -> dict:
        """
        Return a snapshot of current statistics.

        Returns:
            dict: 'num_cars', 'num_close', 'max_velocity' and 'min_velocity';
            velocities are None until at least one sample was observed.
        """
        return {
            "num_cars": self.num_cars,
            "num_close": self.num_close,
            "max_velocity": self.max_velocity,
            "min_velocity": self.min_velocity,
        }
