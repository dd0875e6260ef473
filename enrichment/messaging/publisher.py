"""Publish stage messages without ever failing the caller."""

from __future__ import annotations

from typing import List, Optional

from .. import logging_manager
from ..config_manager import get_settings
from .bus import StreamBus, StreamTransportError
from .message import StreamMessage

logger = logging_manager.get_logger().getChild("messaging.publisher")


class WordMessagePublisher:
    """Fan word messages out to the stage topics.

    When no bus is configured, or the bus cannot be reached, publishing logs a
    warning and returns ``None`` so callers keep working in disconnected mode.
    """

    def __init__(
        self,
        bus: Optional[StreamBus],
        *,
        translation_topic: Optional[str] = None,
        audio_topic: Optional[str] = None,
        image_topic: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self._bus = bus
        self.translation_topic = translation_topic or settings.translation_stream
        self.audio_topic = audio_topic or settings.audio_stream
        self.image_topic = image_topic or settings.image_stream

    @property
    def connected(self) -> bool:
        return self._bus is not None

    def publish(self, topic: str, message: StreamMessage) -> Optional[str]:
        if self._bus is None:
            logger.warning(
                "No stream bus configured; skipping %s message for word %s",
                topic,
                message.word_id,
                extra={"event": "stream.publish.skipped", "topic": topic, "word_id": message.word_id},
            )
            return None
        try:
            message_id = self._bus.publish(topic, message)
        except (StreamTransportError, OSError) as exc:
            logger.warning(
                "Failed to publish %s message for word %s: %s",
                topic,
                message.word_id,
                exc,
                extra={"event": "stream.publish.failed", "topic": topic, "word_id": message.word_id},
            )
            return None
        logger.debug(
            "Published %s message %s for word %s",
            topic,
            message_id,
            message.word_id,
            extra={"event": "stream.publish", "topic": topic, "word_id": message.word_id},
        )
        return message_id

    def publish_translation(self, message: StreamMessage) -> Optional[str]:
        return self.publish(self.translation_topic, message)

    def publish_audio(self, message: StreamMessage) -> Optional[str]:
        return self.publish(self.audio_topic, message)

    def publish_image(self, message: StreamMessage) -> Optional[str]:
        return self.publish(self.image_topic, message)

    def publish_follow_ups(self, message: StreamMessage) -> List[Optional[str]]:
        """Publish the audio and image messages that follow a translation."""

        return [self.publish_audio(message), self.publish_image(message)]


__all__ = ["WordMessagePublisher"]
