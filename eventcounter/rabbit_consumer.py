"""Consume event messages from the broker and dispatch them per event type."""

from __future__ import annotations

import json
import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, MutableSet

import pika

from .consumer import Consumer
from .message import EventType
from .shutdown import ShutdownService

log = logging.getLogger(__name__)

QUEUE_NAME = "eventcountertest"
CONSUMER_TAG = "eventcountertest-consumer"

_STOP = object()


def connect_rabbit(rabbit_url: str, event: Consumer) -> RabbitConsumer:
    """Open a connection and channel to the broker at `rabbit_url`."""
    connection = pika.BlockingConnection(pika.URLParameters(rabbit_url))
    try:
        channel = connection.channel()
    except Exception:
        connection.close()
        raise
    return RabbitConsumer(connection=connection, channel=channel, event=event)


@dataclass
class RabbitConsumer:
    """Reads the event queue and hands each user id to one worker per event type."""

    connection: Any
    channel: Any
    event: Consumer
    work_delay: float = 2.0

    def consume_messages(
        self, stop_event: threading.Event, shutdown_service: ShutdownService
    ) -> None:
        """Consume until `stop_event` is set, the queue closes, or no message arrives
        for `shutdown_service.timeout` seconds; then drain the workers and return."""
        queues: dict[EventType, queue.Queue] = {
            event_type: queue.Queue(maxsize=1) for event_type in EventType
        }
        handlers: dict[EventType, Callable[[str], None]] = {
            EventType.CREATED: self.event.created,
            EventType.UPDATED: self.event.updated,
            EventType.DELETED: self.event.deleted,
        }
        workers = [
            threading.Thread(
                target=self._consume_queue,
                args=(queues[event_type], handlers[event_type]),
                name=f"worker-{event_type.value}",
                daemon=True,
            )
            for event_type in EventType
        ]
        for worker in workers:
            worker.start()

        processed: set[str] = set()
        last_activity = time.monotonic()
        try:
            for method, _properties, body in self.channel.consume(
                QUEUE_NAME,
                auto_ack=True,
                exclusive=False,
                consumer_tag=CONSUMER_TAG,
                inactivity_timeout=shutdown_service.poll_interval,
            ):
                if stop_event.is_set():
                    break
                if method is None:
                    if time.monotonic() - last_activity >= shutdown_service.timeout:
                        log.info("Inactivity timeout reached, stopping consumer")
                        break
                    continue
                last_activity = time.monotonic()
                self.process_message(
                    body, method.routing_key, processed, queues, shutdown_service
                )
        finally:
            if self.channel.is_open:
                self.channel.cancel()
            for q in queues.values():
                q.put(_STOP)
            for worker in workers:
                worker.join()

    def process_message(
        self,
        body: bytes | str,
        routing_key: str,
        processed: MutableSet[str],
        queues: Mapping[EventType, queue.Queue],
        shutdown_service: ShutdownService | None,
    ) -> None:
        """Decode one delivery and put its user id on the queue of its event type.

        Messages whose id was already seen, with a malformed body or routing key,
        or with an unknown event type are logged and dropped.
        """
        try:
            data = json.loads(body)
        except ValueError as exc:
            log.error("Cannot decode message: %s", exc)
            return
        if not isinstance(data, dict) or not isinstance(data.get("id", ""), str):
            log.error("Cannot decode message: %r", body)
            return

        message_id = data.get("id", "")
        if message_id in processed:
            return
        processed.add(message_id)

        parts = routing_key.split(".")
        if len(parts) != 3:
            log.error("Invalid routing key: %s", routing_key)
            return
        user_id, _, event_name = parts

        try:
            event_type = EventType(event_name)
        except ValueError:
            log.error("Unknown event type: %s", event_name)
            return

        queues[event_type].put(user_id)
        log.info("Message dispatched: user_id=%s, event_type=%s", user_id, event_type.value)

        if shutdown_service is not None:
            shutdown_service.update_last_message()

    def _consume_queue(self, q: queue.Queue, handler: Callable[[str], None]) -> None:
        name = threading.current_thread().name
        while (user_id := q.get()) is not _STOP:
            log.info(">> %s started processing %s", name, user_id)
            if self.work_delay > 0:
                time.sleep(self.work_delay)
            try:
                handler(user_id)
            except Exception as exc:
                log.error("Error processing %s: %s", user_id, exc)
            log.info(">> %s finished processing %s", name, user_id)

    def close(self) -> None:
        """Close the channel and the connection."""
        if self.channel is not None and self.channel.is_open:
            self.channel.close()
        if self.connection is not None and self.connection.is_open:
            self.connection.close()
        log.info("Broker connection closed")