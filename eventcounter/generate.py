"""Random message generation."""

from __future__ import annotations

import random
import uuid

from .message import EventType, Message

USERS = ("user_a", "user_b", "user_c", "user_d", "user_e")

EVENTS = (EventType.CREATED, EventType.DELETED, EventType.UPDATED)


def new_message() -> Message:
    """Return a message with a fresh UUID, a random event type and a random user."""
    return Message(
        uid=str(uuid.uuid4()),
        event_type=random.choice(EVENTS),
        user_id=random.choice(USERS),
    )