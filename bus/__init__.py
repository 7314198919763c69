"""
bus — In-memory simulation event transport
==========================================

Provides a lightweight pub/sub layer the intersection engine uses to
announce observable events, and the statistics sink that consumes them.
Nothing published here feeds back into arbitration.

Modules
-------
message
    :class:`SimEvent` dataclass.
event_bus
    :class:`EventBus` publish / poll / subscribe transport and topic names.
metrics
    :class:`SimulationStats` running totals and min / max velocity.
utils
    ID generation.
"""

from .message import SimEvent
from .event_bus import (
    EventBus,
    TOPIC_CLOSE_CALL,
    TOPIC_VEHICLE_ADDED,
    TOPIC_VELOCITY,
)
from .metrics import SimulationStats
from .utils import new_msg_id

__all__ = [
    "SimEvent",
    "EventBus",
    "SimulationStats",
    "TOPIC_CLOSE_CALL",
    "TOPIC_VEHICLE_ADDED",
    "TOPIC_VELOCITY",
    "new_msg_id",
]
