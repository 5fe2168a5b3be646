"""Consumer interface for events and a wrapper that delays each call."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol, runtime_checkable

MAX_DELAY_SECONDS = 30


@runtime_checkable
class Consumer(Protocol):
    """Receives one call per event, keyed by the event's user id."""

    def created(self, uid: str) -> None:
        """Handle a created event."""

    def updated(self, uid: str) -> None:
        """Handle an updated event."""

    def deleted(self, uid: str) -> None:
        """Handle a deleted event."""


@dataclass
class ConsumerWrapper:
    """Delegates to a consumer after sleeping a random whole number of seconds (0-29)."""

    consumer: Consumer
    sleep: Callable[[float], None] = time.sleep
    rng: random.Random = field(default_factory=random.Random)

    def _random_sleep(self) -> None:
        self.sleep(self.rng.randrange(MAX_DELAY_SECONDS))

    def created(self, uid: str) -> None:
        self._random_sleep()
        self.consumer.created(uid)

    def updated(self, uid: str) -> None:
        self._random_sleep()
        self.consumer.updated(uid)

    def deleted(self, uid: str) -> None:
        self._random_sleep()
        self.consumer.deleted(uid)