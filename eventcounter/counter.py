"""Thread-safe per-event, per-user counters."""

from __future__ import annotations

import threading
from collections import defaultdict

from .message import EventType


def _key(event_type: EventType | str) -> str:
    if isinstance(event_type, EventType):
        return event_type.value
    return str(event_type)


class CounterService:
    """Counts events by type and user; usable as a consumer."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count: defaultdict[str, defaultdict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )

    def increment(self, event_type: EventType | str, user_id: str) -> None:
        """Add one to the counter of the given event type and user."""
        with self._lock:
            self._count[_key(event_type)][user_id] += 1

    def created(self, user_id: str) -> None:
        self.increment(EventType.CREATED, user_id)

    def updated(self, user_id: str) -> None:
        self.increment(EventType.UPDATED, user_id)

    def deleted(self, user_id: str) -> None:
        self.increment(EventType.DELETED, user_id)

    def get_data(self) -> dict[str, dict[str, int]]:
        """Return a copy of the counters: event type -> user id -> count."""
        with self._lock:
            return {event: dict(users) for event, users in self._count.items()}