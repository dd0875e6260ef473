"""Background consumer loop for one stream topic."""

from __future__ import annotations

import socket
import threading
import uuid
from typing import Callable, List, Optional

from .. import logging_manager
from ..logging_manager import log_context
from .bus import StreamBus, StreamDelivery
from .message import StreamMessage

logger = logging_manager.get_logger().getChild("messaging.consumer")

MessageHandler = Callable[[StreamMessage], None]


def default_consumer_id(topic: str) -> str:
    """Return a consumer name unique to this process and topic."""

    return f"{socket.gethostname()}-{topic}-{uuid.uuid4().hex[:8]}"


class StreamConsumer:
    """Drive ``handler`` with messages read from ``topic`` on a daemon thread.

    Each message is acknowledged only after its handler returns. A handler
    exception is logged and the message stays pending; every poll first
    reclaims messages left pending longer than ``reclaim_idle_ms`` (by this
    or a crashed consumer) and redelivers them. Read failures wait
    ``backoff_seconds`` and retry indefinitely.
    """

    def __init__(
        self,
        bus: StreamBus,
        topic: str,
        group: str,
        handler: MessageHandler,
        *,
        consumer_id: Optional[str] = None,
        batch_size: int = 10,
        block_ms: int = 1000,
        backoff_seconds: float = 5.0,
        reclaim_idle_ms: Optional[int] = 60_000,
    ) -> None:
        self._bus = bus
        self.topic = topic
        self.group = group
        self._handler = handler
        self.consumer_id = consumer_id or default_consumer_id(topic)
        self._batch_size = max(1, int(batch_size))
        self._block_ms = max(0, int(block_ms))
        self._backoff_seconds = max(0.0, float(backoff_seconds))
        self._reclaim_idle_ms = None if reclaim_idle_ms is None else max(0, int(reclaim_idle_ms))
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._group_ready = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=f"stream-consumer-{self.topic}",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "Started consumer %s on %s",
            self.consumer_id,
            self.topic,
            extra={"event": "stream.consumer.started", "topic": self.topic},
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.info(
            "Stopped consumer %s on %s",
            self.consumer_id,
            self.topic,
            extra={"event": "stream.consumer.stopped", "topic": self.topic},
        )

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.poll_once()

    def poll_once(self) -> int:
        """Read one batch and dispatch it; return the number acknowledged."""

        try:
            if not self._group_ready:
                self._bus.ensure_group(self.topic, self.group)
                self._group_ready = True
            deliveries = self._reclaim()
            deliveries.extend(
                self._bus.consume(
                    self.topic,
                    self.group,
                    self.consumer_id,
                    max_batch=self._batch_size,
                    block_ms=0 if deliveries else self._block_ms,
                )
            )
        except Exception as exc:
            logger.error(
                "Error reading from %s: %s; retrying in %.1fs",
                self.topic,
                exc,
                self._backoff_seconds,
                extra={"event": "stream.read_failed", "topic": self.topic},
            )
            self._stop_event.wait(self._backoff_seconds)
            return 0

        acknowledged = 0
        for message_id, message in deliveries:
            if self._dispatch(message_id, message):
                acknowledged += 1
        return acknowledged

    def _reclaim(self) -> List[StreamDelivery]:
        if self._reclaim_idle_ms is None:
            return []
        reclaimed = self._bus.reclaim_pending(
            self.topic,
            self.group,
            self.consumer_id,
            min_idle_ms=self._reclaim_idle_ms,
            max_batch=self._batch_size,
        )
        if reclaimed:
            logger.info(
                "Reclaimed %s pending messages on %s",
                len(reclaimed),
                self.topic,
                extra={"event": "stream.reclaimed", "topic": self.topic},
            )
        return list(reclaimed)

    def _dispatch(self, message_id: str, message: StreamMessage) -> bool:
        with log_context(word_id=message.word_id, topic=self.topic):
            try:
                self._handler(message)
            except Exception as exc:
                logger.error(
                    "Handler failed for message %s: %s",
                    message_id,
                    exc,
                    exc_info=True,
                    extra={"event": "stream.handler_failed"},
                )
                return False
            try:
                self._bus.acknowledge(self.topic, self.group, message_id)
            except Exception as exc:
                logger.error(
                    "Failed to acknowledge message %s: %s",
                    message_id,
                    exc,
                    extra={"event": "stream.ack_failed"},
                )
                return False
        return True


__all__ = ["MessageHandler", "StreamConsumer", "default_consumer_id"]
