"""Stream bus, message schema, publisher and consumer loop."""

from .bus import InMemoryStreamBus, RedisStreamBus, StreamBus, StreamTransportError
from .consumer import StreamConsumer
from .message import StreamMessage
from .publisher import WordMessagePublisher

__all__ = [
    "InMemoryStreamBus",
    "RedisStreamBus",
    "StreamBus",
    "StreamConsumer",
    "StreamMessage",
    "StreamTransportError",
    "WordMessagePublisher",
]
