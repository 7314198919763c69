"""
Utility functions for the EventBus:
    - event ID generation
"""

import uuid


def new_msg_id(topic: str = "") -> str:
    """
    Generate a unique event ID, prefixed with the topic's last segment.

    Args:
        topic (str): Topic the event is published on (e.g. 'vehicle.added').

    Returns:
        str: e.g. 'added-3f2c9a1b7e4d'; just the hex part when *topic* is empty.
    """
    suffix = uuid.uuid4().hex[:12]
    kind = topic.rsplit(".", 1)[-1]
    return f"{kind}-{suffix}" if kind else suffix
