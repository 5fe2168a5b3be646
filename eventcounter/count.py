"""Count generated messages and write the expected totals as JSON files."""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Iterable

from .message import EventType, Message

log = logging.getLogger(__name__)


def count_messages(msgs: Iterable[Message]) -> dict[EventType, dict[str, int]]:
    """Return event type -> user id -> number of messages."""
    output: defaultdict[EventType, defaultdict[str, int]] = defaultdict(lambda: defaultdict(int))
    for msg in msgs:
        output[EventType(msg.event_type)][msg.user_id] += 1
    return {event: dict(users) for event, users in output.items()}


def _write_file(path: Path, name: str, content: dict[str, int]) -> None:
    filename = path / f"{name}.json"
    try:
        filename.write_text(json.dumps(content, indent="\t", sort_keys=True), encoding="utf-8")
    except OSError as exc:
        log.error("can't write file %s.json, err: %s", name, exc)


def write(path: Path | str, msgs: Iterable[Message]) -> None:
    """Write `<event type>.json` under `path` for each counted event type; failures are logged."""
    directory = Path(path)
    for event_type, users in count_messages(msgs).items():
        _write_file(directory, event_type.value, users)