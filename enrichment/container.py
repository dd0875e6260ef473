"""Process-wide wiring of stores, bus, pools, workers and the session manager."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import logging_manager
from .config_manager import EnrichmentSettings, get_database_url, get_redis_url, get_settings
from .generators.registry import Capabilities, load_capabilities
from .generators.storage import LocalImageStorage
from .messaging.bus import InMemoryStreamBus, RedisStreamBus, StreamBus
from .messaging.publisher import WordMessagePublisher
from .sessions.bundler import AssetBundler
from .sessions.manager import SessionManager
from .sessions.orchestrator import BatchOrchestrator
from .sessions.reuse import DedupResolver
from .sessions.store import InMemorySessionStore, SessionStore
from .workers.audio import AudioWorker
from .workers.audio_batch import AudioBatchGenerator
from .workers.image import ImageWorker
from .workers.pool import WorkerPool
from .workers.runner import PipelineRunner
from .workers.translation import TranslationWorker
from .words.store import InMemoryWordStore, WordStatusStore

logger = logging_manager.get_logger().getChild("container")


@dataclass
class PipelineContainer:
    """Every long-lived collaborator of one enrichment process."""

    settings: EnrichmentSettings
    capabilities: Capabilities
    word_store: WordStatusStore
    session_store: SessionStore
    bus: StreamBus
    publisher: WordMessagePublisher
    audio_pool: WorkerPool
    image_pool: WorkerPool
    audio_generator: AudioBatchGenerator
    bundler: AssetBundler
    translation_worker: TranslationWorker
    audio_worker: AudioWorker
    image_worker: ImageWorker
    orchestrator: BatchOrchestrator
    manager: SessionManager
    runner: PipelineRunner

    @classmethod
    def build(
        cls,
        *,
        capabilities: Optional[Capabilities] = None,
        settings: Optional[EnrichmentSettings] = None,
        word_store: Optional[WordStatusStore] = None,
        session_store: Optional[SessionStore] = None,
        bus: Optional[StreamBus] = None,
    ) -> "PipelineContainer":
        """Assemble a container, choosing SQL/Redis backends when configured."""

        settings = settings or get_settings()
        capabilities = capabilities if capabilities is not None else load_capabilities()

        if word_store is None or session_store is None:
            sql_word_store, sql_session_store = _build_sql_stores()
            word_store = word_store or sql_word_store or InMemoryWordStore()
            session_store = session_store or sql_session_store or InMemorySessionStore()

        if bus is None:
            redis_url = get_redis_url()
            if redis_url:
                bus = RedisStreamBus.from_url(redis_url)
                logger.info("Using Redis stream bus", extra={"event": "container.bus.redis"})
            else:
                bus = InMemoryStreamBus()
                logger.info(
                    "No Redis URL configured; using in-process stream bus",
                    extra={"event": "container.bus.memory"},
                )

        publisher = WordMessagePublisher(
            bus,
            translation_topic=settings.translation_stream,
            audio_topic=settings.audio_stream,
            image_topic=settings.image_stream,
        )
        audio_pool = WorkerPool("audio", max_workers=settings.audio_pool_size)
        image_pool = WorkerPool("image", max_workers=settings.image_pool_size)
        audio_generator = AudioBatchGenerator(
            capabilities.synthesizer,
            audio_pool,
            output_dir=Path(settings.audio_output_dir),
        )
        image_storage = capabilities.image_storage or LocalImageStorage(
            Path(settings.image_output_dir)
        )
        bundler = AssetBundler(
            audio_dir=Path(settings.audio_output_dir),
            image_dir=Path(settings.image_output_dir),
            zip_dir=Path(settings.zip_output_dir),
        )

        translation_worker = TranslationWorker(word_store, capabilities.translator, publisher)
        audio_worker = AudioWorker(word_store, audio_generator)
        image_worker = ImageWorker(
            word_store,
            capabilities.mnemonic_generator,
            capabilities.image_generator,
            image_storage,
            image_pool,
            character_guide=capabilities.character_guide,
        )
        orchestrator = BatchOrchestrator(
            word_store,
            session_store,
            DedupResolver(word_store, session_store),
            audio_generator,
            bundler,
            capabilities.translator,
            image_worker=image_worker,
            sentence_generator=capabilities.sentence_generator,
        )
        manager = SessionManager(
            session_store,
            orchestrator,
            bundler,
            max_workers=settings.session_max_workers,
        )
        runner = PipelineRunner(
            bus,
            translation_worker=translation_worker,
            audio_worker=audio_worker,
            image_worker=image_worker,
            settings=settings,
        )
        return cls(
            settings=settings,
            capabilities=capabilities,
            word_store=word_store,
            session_store=session_store,
            bus=bus,
            publisher=publisher,
            audio_pool=audio_pool,
            image_pool=image_pool,
            audio_generator=audio_generator,
            bundler=bundler,
            translation_worker=translation_worker,
            audio_worker=audio_worker,
            image_worker=image_worker,
            orchestrator=orchestrator,
            manager=manager,
            runner=runner,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop consumers and drain every pool."""

        if self.runner.is_running:
            self.runner.stop()
        self.manager.shutdown(wait=wait)
        self.image_pool.shutdown(wait=wait)
        self.audio_pool.shutdown(wait=wait)


def _build_sql_stores():
    if not get_database_url():
        return None, None
    from .database.engine import create_schema
    from .sessions.sql_store import SqlSessionStore
    from .words.sql_store import SqlWordStore

    create_schema()
    logger.info("Using SQL stores", extra={"event": "container.store.sql"})
    return SqlWordStore(), SqlSessionStore()


__all__ = ["PipelineContainer"]
