from __future__ import annotations

import threading
import zipfile
from pathlib import Path

from enrichment.sessions.models import SessionRecord, SessionStatus
from enrichment.sessions.lifecycle import apply_cancel_transition, apply_retry_transition
from enrichment.words.models import VariantKind
from enrichment.words.status import ProcessingStatus


def _submit(session_store, request) -> int:
    return session_store.create(SessionRecord.for_request(request)).id


def test_batch_reuses_known_words_and_translates_new_ones(
    orchestrator, session_store, word_store, translator, make_request, output_dirs
) -> None:
    known = word_store.get_or_create("casa", "es", "en")
    word_store.update_translation(known.id, ["house"])
    session_id = _submit(session_store, make_request("casa", "perro"))

    session = orchestrator.process(session_id, make_request("casa", "perro"))

    payload = session.payload
    assert session.status is SessionStatus.COMPLETED
    assert translator.calls == [("perro", "es", "en")]
    assert payload.dedup_stats.reused_count == 1
    assert payload.dedup_stats.new_count == 1
    assert payload.dedup_stats.total_count == 2
    assert payload.words[0].reused
    assert payload.words[1].translations == ["dog"]
    assert payload.words[1].translation_status == "success"
    assert payload.processed_words == 2
    assert not payload.processing
    assert not payload.process_summary.has_errors
    assert payload.process_summary.audio_success_count == 2
    assert len(payload.audio_files) == 2
    assert all(Path(path).is_file() for path in payload.audio_files)

    zip_path = Path(session.zip_file_path)
    assert zip_path.is_file()
    with zipfile.ZipFile(zip_path) as archive:
        names = set(archive.namelist())
    assert f"session_{session_id}_metadata.txt" in names
    assert payload.words[1].source_audio_file in names

    record = word_store.find("perro", "es", "en")
    assert record.translation_status is ProcessingStatus.COMPLETED
    assert record.audio_status is ProcessingStatus.COMPLETED
    assert record.audio_source_file == payload.words[1].source_audio_file
    assert record.audio_target_file == payload.words[1].target_audio_files[0]


def test_override_translation_skips_reuse(
    orchestrator, session_store, word_store, translator, make_request
) -> None:
    known = word_store.get_or_create("casa", "es", "en")
    word_store.update_translation(known.id, ["dwelling"])
    request = make_request("casa", override_translation=True, enable_source_audio=False)
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    assert translator.calls == [("casa", "es", "en")]
    assert not session.payload.words[0].reused
    assert session.payload.words[0].translations == ["house", "home"]
    assert word_store.get(known.id).translations == ["house", "home"]


def test_translation_failure_is_recorded_without_failing_session(
    orchestrator, session_store, word_store, translator, synthesizer, make_request
) -> None:
    translator.failures.add("perro")
    request = make_request("perro")
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    summary = session.payload.process_summary
    result = session.payload.words[0]
    assert session.status is SessionStatus.COMPLETED
    assert result.translation_status == "failed"
    assert "rejected perro" in result.translation_error
    assert summary.translation_errors == [
        "Translation failed for perro: translation service rejected perro"
    ]
    assert summary.has_errors
    assert [text for text, _ in synthesizer.calls] == ["perro"]
    assert word_store.find("perro", "es", "en").translation_status is ProcessingStatus.FAILED


def test_audio_failures_are_counted(
    orchestrator, session_store, synthesizer, make_request
) -> None:
    synthesizer.failures.add("dog")
    request = make_request("perro")
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    summary = session.payload.process_summary
    assert summary.audio_success_count == 1
    assert summary.audio_failure_count == 1
    assert len(summary.audio_errors) == 1
    assert summary.audio_errors[0].startswith("Audio generation failed for: ")


def test_identical_audio_is_synthesized_once(
    orchestrator, session_store, translator, synthesizer, make_request
) -> None:
    translator.translations.update({"can": ["dog"]})
    request = make_request("perro", "can", enable_source_audio=False)
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    assert synthesizer.calls == [("dog", "en-US")]
    words = session.payload.words
    assert words[0].target_audio_files == words[1].target_audio_files


def test_sentences_and_images_are_generated(
    orchestrator,
    session_store,
    word_store,
    sentence_generator,
    mnemonic_generator,
    make_request,
    output_dirs,
) -> None:
    request = make_request(
        "perro",
        enable_sentence_generation=True,
        enable_image_generation=True,
        image_style="ANIMATED_2D_CINEMATIC",
    )
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    result = session.payload.words[0]
    assert result.sentence_status == "success"
    assert result.sentence_data["target_language_sentence"] == "My perro is big"
    assert result.sentence_audio_file
    assert result.image_status == "success"
    assert Path(result.image_local_path).is_file()
    assert result.mnemonic_keyword == "perro-key"
    assert mnemonic_generator.calls[0][2].value == "ANIMATED_2D_CINEMATIC"
    assert sentence_generator.calls == [("perro", "es", "en")]
    record = word_store.find("perro", "es", "en")
    assert record.image_status is ProcessingStatus.COMPLETED
    assert word_store.current_variant(record.id, VariantKind.SENTENCE) is not None
    with zipfile.ZipFile(session.zip_file_path) as archive:
        assert result.image_file in archive.namelist()


def test_existing_image_is_reused(
    orchestrator, session_store, word_store, image_generator, make_request
) -> None:
    record = word_store.get_or_create("perro", "es", "en")
    word_store.update_image(record.id, "perro_1.jpg", "Picture of dog")
    request = make_request("perro", enable_image_generation=True, enable_source_audio=False)
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    assert session.payload.words[0].image_status == "reused"
    assert session.payload.words[0].image_file == "perro_1.jpg"
    assert image_generator.prompts == []


def test_image_failure_is_isolated(
    orchestrator, session_store, word_store, image_generator, make_request
) -> None:
    image_generator.fail = True
    request = make_request("perro", enable_image_generation=True)
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    result = session.payload.words[0]
    assert session.status is SessionStatus.COMPLETED
    assert result.image_status == "failed"
    assert result.translations == ["dog"]
    assert session.payload.process_summary.image_errors
    assert word_store.find("perro", "es", "en").image_status is ProcessingStatus.FAILED


def test_cancelled_before_start_is_left_alone(
    orchestrator, session_store, translator, make_request
) -> None:
    request = make_request("perro")
    session_id = _submit(session_store, request)
    session_store.mutate(session_id, apply_cancel_transition)

    session = orchestrator.process(session_id, request)

    assert session.status is SessionStatus.CANCELLED
    assert translator.calls == []


def test_cancellation_stops_remaining_words(
    orchestrator, session_store, translator, make_request
) -> None:
    request = make_request("casa", "perro")
    session_id = _submit(session_store, request)
    original = translator.translate

    def cancel_then_translate(word, source_language, target_language):
        session_store.mutate(session_id, lambda record: apply_cancel_transition(record, "stop"))
        return original(word, source_language, target_language)

    translator.translate = cancel_then_translate

    session = orchestrator.process(session_id, request)

    assert session.status is SessionStatus.CANCELLED
    assert session.cancellation_reason == "stop"
    assert [call[0] for call in translator.calls] == ["casa"]
    assert session.zip_file_path is None


def test_unexpected_error_fails_session(
    orchestrator, session_store, make_request, monkeypatch
) -> None:
    request = make_request("perro")
    session_id = _submit(session_store, request)

    def broken(session, payload):
        raise OSError("disk full")

    monkeypatch.setattr(orchestrator._bundler, "create_session_zip", broken)

    session = orchestrator.process(session_id, request)

    assert session.status is SessionStatus.FAILED
    assert session.payload.error == "disk full"
    assert session_store.get(session_id).payload.error_time is not None


def test_sentence_is_generated_when_translation_fails(
    orchestrator, session_store, translator, sentence_generator, synthesizer, make_request
) -> None:
    translator.failures.add("casa")
    request = make_request(
        "casa", enable_sentence_generation=True, enable_image_generation=True
    )
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    result = session.payload.words[0]
    assert session.status is SessionStatus.COMPLETED
    assert result.translation_status == "failed"
    assert sentence_generator.calls == [("casa", "es", "en")]
    assert result.sentence_status == "success"
    assert result.sentence_audio_file
    assert result.target_audio_files == []
    assert result.image_status is None
    assert sorted(text for text, _ in synthesizer.calls) == ["Mi casa es grande", "casa"]


def test_non_latin_words_get_distinct_audio_files(
    orchestrator, session_store, make_request
) -> None:
    request = make_request("дом", "дома", source_language="ru", target_language="en")
    session_id = _submit(session_store, request)

    session = orchestrator.process(session_id, request)

    first, second = session.payload.words
    assert first.source_audio_file != second.source_audio_file
    assert first.target_audio_files != second.target_audio_files
    assert len(set(session.payload.audio_files)) == 4
    with zipfile.ZipFile(session.zip_file_path) as archive:
        audio_names = [name for name in archive.namelist() if name.endswith(".mp3")]
    assert len(audio_names) == 4


def test_concurrent_session_on_same_word_completes(
    orchestrator, session_store, word_store, translator, make_request
) -> None:
    request = make_request("casa", enable_source_audio=False)
    first_id = _submit(session_store, request)
    second_id = _submit(session_store, request)
    original = translator.translate
    started = threading.Event()

    def translate_while_other_session_runs(word, source_language, target_language):
        if not started.is_set():
            started.set()
            orchestrator.process(second_id, request)
        return original(word, source_language, target_language)

    translator.translate = translate_while_other_session_runs

    first = orchestrator.process(first_id, request)

    assert session_store.get(second_id).status is SessionStatus.COMPLETED
    assert first.status is SessionStatus.COMPLETED
    assert first.payload.error is None
    assert first.payload.words[0].translations == ["house", "home"]
    record = word_store.find("casa", "es", "en")
    assert record.translation_status is ProcessingStatus.COMPLETED
    assert record.audio_status is ProcessingStatus.COMPLETED


def test_superseded_attempt_is_skipped(
    orchestrator, session_store, translator, make_request
) -> None:
    request = make_request("perro")
    session_id = _submit(session_store, request)
    session_store.mutate(session_id, apply_cancel_transition)
    session_store.mutate(session_id, apply_retry_transition)

    session = orchestrator.process(session_id, request, attempt=0)

    assert session.status is SessionStatus.IN_PROGRESS
    assert translator.calls == []


def test_cancelled_run_does_not_overwrite_its_retry(
    orchestrator, session_store, translator, make_request
) -> None:
    request = make_request("casa", "perro", enable_source_audio=False)
    session_id = _submit(session_store, request)
    entered = threading.Event()
    release = threading.Event()
    original = translator.translate

    def blocking_translate(word, source_language, target_language):
        if not entered.is_set():
            entered.set()
            release.wait(10)
        return original(word, source_language, target_language)

    translator.translate = blocking_translate
    stale = threading.Thread(target=orchestrator.process, args=(session_id, request, 0))
    stale.start()
    try:
        assert entered.wait(10)
        session_store.mutate(session_id, apply_cancel_transition)
        session_store.mutate(session_id, apply_retry_transition)

        retried = orchestrator.process(session_id, request, 1)
    finally:
        release.set()
        stale.join(10)

    final = session_store.get(session_id)
    assert retried.status is SessionStatus.COMPLETED
    assert final.status is SessionStatus.COMPLETED
    assert final.payload.error is None
    assert [word.source_word for word in final.payload.words] == ["casa", "perro"]
    assert [call[0] for call in translator.calls] == ["casa", "perro", "casa"]
