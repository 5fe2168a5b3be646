"""Publish generated messages to a topic exchange with publisher confirms."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable

import pika
import pika.exceptions

from .message import EventType, Message

log = logging.getLogger(__name__)

QUEUE_NAME = "eventcountertest"
BINDING_KEY = "*.event.*"
CONTENT_ENCODING = "application/json"


class PublishError(Exception):
    """Raised when the broker channel is unusable or closes while publishing."""


def routing_key(message: Message) -> str:
    """Return the routing key `<user id>.event.<event type>` of a message."""
    return f"{message.user_id}.event.{EventType(message.event_type).value}"


def message_body(message: Message) -> bytes:
    """Return the wire body of a message: a JSON object holding its id."""
    return json.dumps({"id": message.uid}, separators=(",", ":")).encode("utf-8")


def _blocking_connection(url: str) -> Any:
    return pika.BlockingConnection(pika.URLParameters(url))


class Publisher:
    """Holds one broker connection and publishes messages on its channel."""

    def __init__(
        self,
        url: str,
        exchange: str,
        connection_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self.url = url
        self.exchange = exchange
        self._connection_factory = connection_factory or _blocking_connection
        self._connection: Any = None
        self._channel: Any = None
        self._confirming = False

    def _get_channel(self) -> Any:
        if self._channel is not None and self._channel.is_open:
            return self._channel
        self._connection = self._connection_factory(self.url)
        channel = self._connection.channel()
        if not channel.is_open:
            raise PublishError("channel closed")
        self._channel = channel
        self._confirming = False
        return channel

    def declare(self) -> None:
        """Declare the topic exchange and the durable queue bound to `*.event.*`."""
        channel = self._get_channel()
        channel.exchange_declare(
            exchange=self.exchange,
            exchange_type="topic",
            durable=True,
            auto_delete=False,
            internal=False,
        )
        channel.queue_declare(
            queue=QUEUE_NAME, durable=True, exclusive=False, auto_delete=False
        )
        channel.queue_bind(queue=QUEUE_NAME, exchange=self.exchange, routing_key=BINDING_KEY)

    def publish(self, msgs: Iterable[Message]) -> None:
        """Publish every message, waiting for broker confirmation of each.

        A message the broker rejects is logged and skipped; a channel or
        connection that closes raises PublishError.
        """
        channel = self._get_channel()
        if not channel.is_open:
            raise PublishError("channel is closed")
        if not self._confirming:
            channel.confirm_delivery()
            self._confirming = True

        properties = pika.BasicProperties(content_encoding=CONTENT_ENCODING)
        for msg in msgs:
            try:
                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=routing_key(msg),
                    body=message_body(msg),
                    properties=properties,
                    mandatory=False,
                )
            except (pika.exceptions.NackError, pika.exceptions.UnroutableError) as exc:
                log.error("can't publish message %s, err: %s", msg.uid, exc)
            except (
                pika.exceptions.AMQPChannelError,
                pika.exceptions.AMQPConnectionError,
            ) as exc:
                raise PublishError("closed") from exc

    def close(self) -> None:
        """Close the channel and the connection if they are open."""
        if self._channel is not None and self._channel.is_open:
            self._channel.close()
        if self._connection is not None and self._connection.is_open:
            self._connection.close()
        self._channel = None
        self._connection = None
        self._confirming = False