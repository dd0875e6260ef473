from __future__ import annotations

from pathlib import Path
from typing import List

from enrichment.generators.capabilities import CharacterMatch
from enrichment.generators.storage import LocalImageStorage
from enrichment.messaging.bus import InMemoryStreamBus
from enrichment.messaging.message import StreamMessage
from enrichment.messaging.publisher import WordMessagePublisher
from enrichment.workers.audio import AudioWorker
from enrichment.workers.audio_batch import AudioBatchGenerator
from enrichment.workers.image import ImageWorker
from enrichment.workers.runner import PipelineRunner
from enrichment.workers.translation import TranslationWorker
from enrichment.words.models import VariantKind
from enrichment.words.status import ProcessingStatus, Stage

GROUP = "test-group"


def _bus_with_groups() -> InMemoryStreamBus:
    bus = InMemoryStreamBus()
    for topic in ("translation", "audio", "image"):
        bus.ensure_group(topic, GROUP)
    return bus


def _publisher(bus: InMemoryStreamBus) -> WordMessagePublisher:
    return WordMessagePublisher(
        bus, translation_topic="translation", audio_topic="audio", image_topic="image"
    )


def _drain(bus: InMemoryStreamBus, topic: str) -> List[int]:
    return [message.word_id for _, message in bus.consume(topic, GROUP, "test", block_ms=0)]


def test_translation_worker_stores_result_and_publishes_follow_ups(word_store, translator) -> None:
    bus = _bus_with_groups()
    record = word_store.get_or_create("casa", "es", "en")
    worker = TranslationWorker(word_store, translator, _publisher(bus))

    status = worker.handle(StreamMessage.for_record(record))

    stored = word_store.get(record.id)
    assert status is ProcessingStatus.COMPLETED
    assert stored.translations == ["house", "home"]
    assert stored.translation_status is ProcessingStatus.COMPLETED
    assert word_store.current_variant(record.id, VariantKind.TRANSLATION).payload["translations"] == [
        "house",
        "home",
    ]
    assert _drain(bus, "audio") == [record.id]
    assert _drain(bus, "image") == [record.id]


def test_translation_worker_keeps_overridden_translation(word_store, translator) -> None:
    bus = _bus_with_groups()
    record = word_store.get_or_create("casa", "es", "en")
    word_store.update_translation(record.id, ["dwelling"], override=True)
    worker = TranslationWorker(word_store, translator, _publisher(bus))

    worker.handle(StreamMessage.for_record(record))

    assert translator.calls == []
    assert word_store.get(record.id).translations == ["dwelling"]
    assert _drain(bus, "audio") == [record.id]


def test_translation_failure_marks_only_translation_failed(word_store, translator) -> None:
    bus = _bus_with_groups()
    translator.failures.add("casa")
    record = word_store.get_or_create("casa", "es", "en")
    worker = TranslationWorker(word_store, translator, _publisher(bus))

    status = worker.handle(StreamMessage.for_record(record))

    stored = word_store.get(record.id)
    assert status is ProcessingStatus.FAILED
    assert stored.translation_status is ProcessingStatus.FAILED
    assert stored.audio_status is ProcessingStatus.PENDING
    assert stored.translations == []
    assert _drain(bus, "audio") == []


def test_unknown_word_is_dropped(word_store, translator) -> None:
    worker = TranslationWorker(word_store, translator, WordMessagePublisher(None))

    assert worker.handle(StreamMessage(99, "nada", "es", "en")) is None
    assert translator.calls == []


def test_audio_worker_records_source_and_target_files(word_store, synthesizer, audio_pool) -> None:
    record = word_store.get_or_create("casa", "es", "en")
    word_store.update_translation(record.id, ["house"])
    worker = AudioWorker(word_store, AudioBatchGenerator(synthesizer, audio_pool))

    status = worker.handle(StreamMessage.for_record(record))

    stored = word_store.get(record.id)
    assert status is ProcessingStatus.COMPLETED
    assert stored.audio_source_file == "casa_source.mp3"
    assert stored.audio_target_file == "casa_target.mp3"
    assert sorted(synthesizer.calls) == [("casa", "es-US"), ("house", "en-US")]


def test_audio_worker_fails_stage_when_a_clip_fails(word_store, synthesizer, audio_pool) -> None:
    synthesizer.failures.add("house")
    record = word_store.get_or_create("casa", "es", "en")
    word_store.update_translation(record.id, ["house"])
    worker = AudioWorker(word_store, AudioBatchGenerator(synthesizer, audio_pool))

    worker.handle(StreamMessage.for_record(record))

    stored = word_store.get(record.id)
    assert stored.audio_status is ProcessingStatus.FAILED
    assert stored.audio_source_file is None


def _image_worker(word_store, mnemonic_generator, image_generator, image_pool, output_dirs, **kwargs):
    return ImageWorker(
        word_store,
        mnemonic_generator,
        image_generator,
        LocalImageStorage(output_dirs["image"]),
        image_pool,
        **kwargs,
    )


def test_image_worker_requires_translation(
    word_store, mnemonic_generator, image_generator, image_pool, output_dirs
) -> None:
    record = word_store.get_or_create("casa", "es", "en")
    worker = _image_worker(word_store, mnemonic_generator, image_generator, image_pool, output_dirs)

    status = worker.handle(StreamMessage.for_record(record))

    assert status is ProcessingStatus.FAILED
    assert word_store.get(record.id).image_status is ProcessingStatus.FAILED
    assert mnemonic_generator.calls == []
    assert image_generator.prompts == []


def test_image_worker_stores_mnemonic_and_image(
    word_store, mnemonic_generator, image_generator, image_pool, output_dirs, character_guide
) -> None:
    character_guide.match = CharacterMatch(id=7, name="Cassie")
    record = word_store.get_or_create("casa", "es", "en")
    word_store.update_translation(record.id, ["house"])
    worker = _image_worker(
        word_store,
        mnemonic_generator,
        image_generator,
        image_pool,
        output_dirs,
        character_guide=character_guide,
    )

    status = worker.handle(StreamMessage.for_record(record))

    stored = word_store.get(record.id)
    assert status is ProcessingStatus.COMPLETED
    assert stored.mnemonic_keyword == "casa-key"
    assert stored.character_guide_id == 7
    assert stored.image_prompt == "Picture of house"
    assert stored.image_file.endswith(".jpg")
    assert (output_dirs["image"] / stored.image_file).read_bytes() == b"jpeg-bytes"
    assert mnemonic_generator.calls[0][3] == character_guide.match
    image_variant = word_store.current_variant(record.id, VariantKind.IMAGE)
    assert image_variant.payload["image_file"] == stored.image_file
    assert word_store.current_variant(record.id, VariantKind.MNEMONIC) is not None


def test_image_failure_leaves_other_stages_untouched(
    word_store, mnemonic_generator, image_generator, image_pool, output_dirs
) -> None:
    image_generator.fail = True
    record = word_store.get_or_create("casa", "es", "en")
    word_store.update_translation(record.id, ["house"])
    word_store.set_stage_status(record.id, Stage.TRANSLATION, ProcessingStatus.PROCESSING)
    word_store.set_stage_status(record.id, Stage.TRANSLATION, ProcessingStatus.COMPLETED)
    worker = _image_worker(word_store, mnemonic_generator, image_generator, image_pool, output_dirs)

    worker.handle(StreamMessage.for_record(record))

    stored = word_store.get(record.id)
    assert stored.image_status is ProcessingStatus.FAILED
    assert stored.translation_status is ProcessingStatus.COMPLETED
    assert stored.image_file is None
    assert not list(Path(output_dirs["image"]).glob("*.jpg"))


def test_runner_drives_word_through_every_stage(
    word_store,
    translator,
    synthesizer,
    mnemonic_generator,
    image_generator,
    audio_pool,
    image_pool,
    output_dirs,
) -> None:
    from enrichment.config_manager import get_settings

    settings = get_settings()
    bus = InMemoryStreamBus()
    publisher = WordMessagePublisher(bus)
    runner = PipelineRunner(
        bus,
        translation_worker=TranslationWorker(word_store, translator, publisher),
        audio_worker=AudioWorker(word_store, AudioBatchGenerator(synthesizer, audio_pool)),
        image_worker=_image_worker(
            word_store, mnemonic_generator, image_generator, image_pool, output_dirs
        ),
        settings=settings,
    )
    record = word_store.get_or_create("perro", "es", "en")

    runner.start()
    try:
        publisher.publish_translation(StreamMessage.for_record(record))
        for _ in range(500):
            if word_store.get(record.id).overall_status() is ProcessingStatus.COMPLETED:
                break
            runner.consumers[0]._stop_event.wait(0.01)
    finally:
        runner.stop(timeout=2)

    stored = word_store.get(record.id)
    assert stored.overall_status() is ProcessingStatus.COMPLETED
    assert stored.audio_target_file == "perro_target.mp3"
    assert stored.image_file is not None
    assert not runner.is_running
