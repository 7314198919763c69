"""
SimEvent: Data structure representing an event published on the EventBus.
"""

from dataclasses import dataclass


@dataclass
class SimEvent:
    """
    Represents a single observable simulation event.

    Attributes:
        id (str): Unique identifier for the event.
        topic (str): The topic of the event (e.g., 'vehicle.added', 'vehicle.close_call').
        sender (str): Component that emitted the event (e.g., 'intersection').
        payload (dict): Arbitrary dictionary containing event contents.
        ts (float): Simulated time (in seconds) at which the event was emitted.
    """
    id: str
    topic: str
    sender: str
    payload: dict
    ts: float
