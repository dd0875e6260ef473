"""Wire the stage workers to their topics and run the consumers."""

from __future__ import annotations

from typing import List, Optional

from .. import logging_manager
from ..config_manager import EnrichmentSettings, get_settings
from ..messaging.bus import StreamBus
from ..messaging.consumer import StreamConsumer
from .audio import AudioWorker
from .image import ImageWorker
from .translation import TranslationWorker

logger = logging_manager.get_logger().getChild("workers.runner")


class PipelineRunner:
    """Own one :class:`StreamConsumer` per stage topic."""

    def __init__(
        self,
        bus: StreamBus,
        *,
        translation_worker: TranslationWorker,
        audio_worker: AudioWorker,
        image_worker: ImageWorker,
        settings: Optional[EnrichmentSettings] = None,
    ) -> None:
        settings = settings or get_settings()
        options = {
            "batch_size": settings.consumer_batch_size,
            "block_ms": settings.consumer_block_ms,
            "backoff_seconds": settings.consumer_backoff_seconds,
            "reclaim_idle_ms": settings.consumer_reclaim_idle_ms,
        }
        group = settings.consumer_group
        self._consumers: List[StreamConsumer] = [
            StreamConsumer(bus, settings.translation_stream, group, translation_worker, **options),
            StreamConsumer(bus, settings.audio_stream, group, audio_worker, **options),
            StreamConsumer(bus, settings.image_stream, group, image_worker, **options),
        ]

    @property
    def consumers(self) -> List[StreamConsumer]:
        return list(self._consumers)

    @property
    def is_running(self) -> bool:
        return any(consumer.is_running for consumer in self._consumers)

    def start(self) -> None:
        for consumer in self._consumers:
            consumer.start()
        logger.info(
            "Pipeline consumers started",
            extra={"event": "pipeline.started"},
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        for consumer in self._consumers:
            consumer.stop(timeout)
        logger.info(
            "Pipeline consumers stopped",
            extra={"event": "pipeline.stopped"},
        )


__all__ = ["PipelineRunner"]
