"""Event types and the message record published for each event."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EventType(str, Enum):
    """Kinds of events a user can trigger."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Message:
    """One event produced by a user."""

    uid: str
    event_type: EventType
    user_id: str

    def to_dict(self) -> dict[str, str]:
        """Return the message as its JSON field mapping."""
        return {
            "uid": self.uid,
            "event_type": EventType(self.event_type).value,
            "user_id": self.user_id,
        }