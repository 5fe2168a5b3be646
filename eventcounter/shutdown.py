"""Inactivity monitor that stops consumption and exports counters as JSON."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .counter import CounterService
from .message import EventType

log = logging.getLogger(__name__)

EXPORT_ORDER = (EventType.CREATED, EventType.UPDATED, EventType.DELETED)


@dataclass
class ShutdownService:
    """Tracks the time of the last message and shuts down after `timeout` seconds of silence."""

    timeout: float
    output_dir: Path | str = "./output"
    poll_interval: float = 0.5
    _last_message: float = field(default_factory=time.monotonic, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def update_last_message(self) -> None:
        """Record that a message arrived now."""
        with self._lock:
            self._last_message = time.monotonic()

    def _elapsed(self) -> float:
        with self._lock:
            return time.monotonic() - self._last_message

    def monitor_and_shutdown(
        self,
        stop_event: threading.Event,
        cancel: Callable[[], None],
        counter: CounterService,
    ) -> threading.Thread:
        """Start a background watcher; on timeout call `cancel` and export the counters.

        The watcher exits quietly once `stop_event` is set. The started thread is returned.
        """
        self.update_last_message()

        def watch() -> None:
            while not stop_event.wait(self.poll_interval):
                if self._elapsed() >= self.timeout:
                    log.info("Inactivity timeout reached, shutting down")
                    cancel()
                    self.export_json(counter)
                    return

        thread = threading.Thread(target=watch, name="shutdown-monitor", daemon=True)
        thread.start()
        return thread

    def export_json(self, counter: CounterService) -> None:
        """Write one `<event type>.json` file per event type that has counts."""
        data = counter.get_data()
        out = Path(self.output_dir)
        for event_type in EXPORT_ORDER:
            users = data.get(event_type.value)
            if users is None:
                continue
            filename = out / f"{event_type.value}.json"
            try:
                with open(filename, "w", encoding="utf-8") as fh:
                    json.dump(users, fh, indent=2, sort_keys=True)
                    fh.write("\n")
            except OSError as exc:
                log.error("Cannot write %s: %s", filename, exc)
        log.info("JSON files exported")