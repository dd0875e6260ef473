from __future__ import annotations

from typing import Iterator

import pytest

from enrichment.generators.storage import LocalImageStorage
from enrichment.sessions.bundler import AssetBundler
from enrichment.sessions.manager import SessionManager
from enrichment.sessions.models import BatchRequest
from enrichment.sessions.orchestrator import BatchOrchestrator
from enrichment.sessions.reuse import DedupResolver
from enrichment.workers.audio_batch import AudioBatchGenerator
from enrichment.workers.image import ImageWorker
from enrichment.workers.pool import WorkerPool


@pytest.fixture
def bundler(output_dirs) -> AssetBundler:
    return AssetBundler(
        audio_dir=output_dirs["audio"],
        image_dir=output_dirs["image"],
        zip_dir=output_dirs["zip"],
    )


@pytest.fixture
def image_worker(
    word_store, mnemonic_generator, image_generator, character_guide, image_pool, output_dirs
) -> ImageWorker:
    return ImageWorker(
        word_store,
        mnemonic_generator,
        image_generator,
        LocalImageStorage(output_dirs["image"]),
        image_pool,
        character_guide=character_guide,
    )


@pytest.fixture
def orchestrator(
    word_store,
    session_store,
    translator,
    synthesizer,
    sentence_generator,
    audio_pool,
    image_worker,
    bundler,
    output_dirs,
) -> BatchOrchestrator:
    return BatchOrchestrator(
        word_store,
        session_store,
        DedupResolver(word_store, session_store),
        AudioBatchGenerator(synthesizer, audio_pool, output_dir=output_dirs["audio"]),
        bundler,
        translator,
        image_worker=image_worker,
        sentence_generator=sentence_generator,
    )


@pytest.fixture
def manager(session_store, orchestrator, bundler) -> Iterator[SessionManager]:
    manager = SessionManager(
        session_store, orchestrator, bundler, pool=WorkerPool("session-test", max_workers=1)
    )
    yield manager
    manager.shutdown()


@pytest.fixture
def make_request():
    def _make(*words: str, **options) -> BatchRequest:
        return BatchRequest(
            source_words=list(words),
            source_language=options.pop("source_language", "es"),
            target_language=options.pop("target_language", "en"),
            **options,
        )

    return _make
