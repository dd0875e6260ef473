from __future__ import annotations

from pathlib import Path

from enrichment.generators.voices import resolve_voice
from enrichment.workers.audio_batch import AudioBatchGenerator, AudioRequest


def test_batch_writes_files_with_absolute_paths(synthesizer, audio_pool, output_dirs) -> None:
    generator = AudioBatchGenerator(synthesizer, audio_pool)
    requests = [
        AudioRequest("casa", resolve_voice("es"), "casa_source"),
        AudioRequest("house", resolve_voice("en"), "casa_target.mp3"),
    ]

    results = generator.generate(requests)

    assert [result.file_name for result in results] == ["casa_source.mp3", "casa_target.mp3"]
    assert [result.language_code for result in results] == ["es-US", "en-US"]
    for result in results:
        path = Path(result.local_file_path)
        assert result.succeeded
        assert path.is_absolute()
        assert path.parent == output_dirs["audio"].resolve()
    assert Path(results[1].local_file_path).read_bytes() == b"audio:house"


def test_failed_request_does_not_abort_batch(synthesizer, audio_pool) -> None:
    synthesizer.failures.add("perro")
    generator = AudioBatchGenerator(synthesizer, audio_pool)

    results = generator.generate(
        [
            AudioRequest("perro", resolve_voice("es"), "perro"),
            AudioRequest("gato", resolve_voice("es"), "gato"),
        ]
    )

    assert results[0].local_file_path is None
    assert "tts failed" in results[0].error
    assert results[1].succeeded


def test_missing_synthesizer_fails_every_request(audio_pool) -> None:
    generator = AudioBatchGenerator(None, audio_pool)

    results = generator.generate([AudioRequest("casa", resolve_voice("es"), "casa")])

    assert not results[0].succeeded
    assert results[0].error == "Speech synthesizer is not configured"


def test_empty_batch_returns_empty_list(synthesizer, audio_pool) -> None:
    assert AudioBatchGenerator(synthesizer, audio_pool).generate([]) == []
    assert synthesizer.calls == []


def test_dedup_key_ignores_file_name() -> None:
    voice = resolve_voice("en")

    assert AudioRequest("dog", voice, "a").dedup_key() == AudioRequest("dog", voice, "b").dedup_key()
    assert AudioRequest("dog", voice, "a").dedup_key() != AudioRequest("dog", resolve_voice("es"), "a").dedup_key()
