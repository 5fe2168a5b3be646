"""Count per-user events exchanged over RabbitMQ and export the totals as JSON."""

__version__ = "0.1.0"

__all__ = [
    "consumer",
    "count",
    "counter",
    "generate",
    "message",
    "publisher",
    "rabbit_consumer",
    "shutdown",
]