"""Append-only topic logs with consumer-group delivery.

Two implementations share the :class:`StreamBus` contract:

* :class:`InMemoryStreamBus` keeps every topic in process memory and is used
  in single-process mode and by the test-suite.
* :class:`RedisStreamBus` maps the contract onto Redis Streams
  (``XADD``/``XGROUP``/``XREADGROUP``/``XACK``/``XAUTOCLAIM``).

Delivery is at-least-once. A message handed to a consumer stays pending in its
group until acknowledged; pending messages of a crashed consumer can be
re-claimed by another one.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

import redis
from redis.exceptions import RedisError, ResponseError

from .. import logging_manager
from .message import StreamMessage

logger = logging_manager.get_logger().getChild("messaging.bus")

StreamDelivery = Tuple[str, StreamMessage]


class StreamTransportError(RuntimeError):
    """Raised when the underlying stream transport cannot be reached."""


class StreamBus(Protocol):
    """Contract shared by every stream bus implementation."""

    def publish(self, topic: str, message: StreamMessage) -> str:
        ...

    def ensure_group(self, topic: str, group: str) -> None:
        ...

    def consume(
        self,
        topic: str,
        group: str,
        consumer_id: str,
        *,
        max_batch: int = 10,
        block_ms: int = 1000,
    ) -> List[StreamDelivery]:
        ...

    def acknowledge(self, topic: str, group: str, message_id: str) -> None:
        ...

    def reclaim_pending(
        self,
        topic: str,
        group: str,
        consumer_id: str,
        *,
        min_idle_ms: int,
        max_batch: int = 10,
    ) -> List[StreamDelivery]:
        ...


@dataclass
class _PendingEntry:
    consumer_id: str
    delivered_at: float
    deliveries: int = 1


@dataclass
class _GroupState:
    cursor: int = 0
    pending: Dict[str, _PendingEntry] = field(default_factory=dict)


class InMemoryStreamBus(StreamBus):
    """Thread-safe, process-local implementation of :class:`StreamBus`."""

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.RLock())
        self._entries: Dict[str, List[Tuple[str, StreamMessage]]] = {}
        self._groups: Dict[Tuple[str, str], _GroupState] = {}
        self._sequence = count(1)

    def publish(self, topic: str, message: StreamMessage) -> str:
        with self._condition:
            message_id = f"{int(time.time() * 1000)}-{next(self._sequence)}"
            self._entries.setdefault(topic, []).append((message_id, message))
            self._condition.notify_all()
        return message_id

    def ensure_group(self, topic: str, group: str) -> None:
        with self._condition:
            self._entries.setdefault(topic, [])
            self._groups.setdefault((topic, group), _GroupState())

    def consume(
        self,
        topic: str,
        group: str,
        consumer_id: str,
        *,
        max_batch: int = 10,
        block_ms: int = 1000,
    ) -> List[StreamDelivery]:
        deadline = time.monotonic() + max(block_ms, 0) / 1000.0
        with self._condition:
            state = self._groups.get((topic, group))
            if state is None:
                raise KeyError(f"Consumer group {group!r} does not exist on {topic!r}")
            entries = self._entries.setdefault(topic, [])
            while state.cursor >= len(entries):
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return []
                self._condition.wait(remaining)
            batch = entries[state.cursor : state.cursor + max(max_batch, 1)]
            state.cursor += len(batch)
            now = time.monotonic()
            for message_id, _ in batch:
                state.pending[message_id] = _PendingEntry(consumer_id, now)
            return list(batch)

    def acknowledge(self, topic: str, group: str, message_id: str) -> None:
        with self._condition:
            state = self._groups.get((topic, group))
            if state is not None:
                state.pending.pop(message_id, None)

    def reclaim_pending(
        self,
        topic: str,
        group: str,
        consumer_id: str,
        *,
        min_idle_ms: int,
        max_batch: int = 10,
    ) -> List[StreamDelivery]:
        with self._condition:
            state = self._groups.get((topic, group))
            if state is None:
                return []
            now = time.monotonic()
            messages = dict(self._entries.get(topic, []))
            claimed: List[StreamDelivery] = []
            for message_id, entry in state.pending.items():
                if len(claimed) >= max_batch:
                    break
                if (now - entry.delivered_at) * 1000.0 < min_idle_ms:
                    continue
                entry.consumer_id = consumer_id
                entry.delivered_at = now
                entry.deliveries += 1
                claimed.append((message_id, messages[message_id]))
            return claimed

    def pending_ids(self, topic: str, group: str) -> List[str]:
        """Return message ids delivered to ``group`` but not yet acknowledged."""

        with self._condition:
            state = self._groups.get((topic, group))
            return list(state.pending) if state is not None else []


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisStreamBus(StreamBus):
    """Redis Streams implementation of :class:`StreamBus`."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisStreamBus":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def publish(self, topic: str, message: StreamMessage) -> str:
        try:
            message_id = self._client.xadd(topic, message.to_fields())
        except RedisError as exc:
            raise StreamTransportError(str(exc)) from exc
        return _text(message_id)

    def ensure_group(self, topic: str, group: str) -> None:
        try:
            self._client.xgroup_create(topic, group, id="0", mkstream=True)
        except ResponseError as exc:
            if "BUSYGROUP" in str(exc):
                return
            raise StreamTransportError(str(exc)) from exc
        except RedisError as exc:
            raise StreamTransportError(str(exc)) from exc
        logger.info(
            "Created consumer group %s on %s",
            group,
            topic,
            extra={"event": "stream.group.created", "topic": topic},
        )

    def consume(
        self,
        topic: str,
        group: str,
        consumer_id: str,
        *,
        max_batch: int = 10,
        block_ms: int = 1000,
    ) -> List[StreamDelivery]:
        try:
            response = self._client.xreadgroup(
                groupname=group,
                consumername=consumer_id,
                streams={topic: ">"},
                count=max_batch,
                block=block_ms if block_ms > 0 else None,
            )
        except RedisError as exc:
            raise StreamTransportError(str(exc)) from exc
        if not response:
            return []
        if isinstance(response, Mapping):
            streams = list(response.items())
        else:
            streams = [(item[0], item[1]) for item in response]
        deliveries: List[StreamDelivery] = []
        for _, entries in streams:
            deliveries.extend(self._decode_entries(topic, group, entries))
        return deliveries

    def acknowledge(self, topic: str, group: str, message_id: str) -> None:
        try:
            self._client.xack(topic, group, message_id)
        except RedisError as exc:
            raise StreamTransportError(str(exc)) from exc

    def reclaim_pending(
        self,
        topic: str,
        group: str,
        consumer_id: str,
        *,
        min_idle_ms: int,
        max_batch: int = 10,
    ) -> List[StreamDelivery]:
        try:
            response = self._client.xautoclaim(
                topic,
                group,
                consumer_id,
                min_idle_time=min_idle_ms,
                start_id="0-0",
                count=max_batch,
            )
        except RedisError as exc:
            raise StreamTransportError(str(exc)) from exc
        if not response or len(response) < 2:
            return []
        return self._decode_entries(topic, group, response[1])

    def _decode_entries(self, topic: str, group: str, entries: Any) -> List[StreamDelivery]:
        deliveries: List[StreamDelivery] = []
        for message_id, fields in entries or []:
            message_id = _text(message_id)
            if not fields:
                # Entry was trimmed from the stream while pending.
                self.acknowledge(topic, group, message_id)
                continue
            try:
                message = StreamMessage.from_fields(fields)
            except ValueError as exc:
                logger.error(
                    "Discarding malformed stream entry %s on %s: %s",
                    message_id,
                    topic,
                    exc,
                    extra={"event": "stream.message.malformed", "topic": topic},
                )
                self.acknowledge(topic, group, message_id)
                continue
            deliveries.append((message_id, message))
        return deliveries


__all__ = [
    "InMemoryStreamBus",
    "RedisStreamBus",
    "StreamBus",
    "StreamDelivery",
    "StreamTransportError",
]
