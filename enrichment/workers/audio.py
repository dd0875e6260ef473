"""Audio stage: speak the word and its primary translation."""

from __future__ import annotations

from typing import List, Optional

from ..filenames import simple_stem
from ..generators.voices import resolve_voice
from ..words.models import WordRecord
from ..words.status import Stage
from ..words.store import WordStatusStore
from .audio_batch import AudioBatchGenerator, AudioRequest
from .base import StageWorker

SOURCE_SUFFIX = "_source"
TARGET_SUFFIX = "_target"


class AudioWorker(StageWorker):
    stage = Stage.AUDIO

    def __init__(self, store: WordStatusStore, generator: AudioBatchGenerator) -> None:
        super().__init__(store)
        self._generator = generator

    def build_requests(self, record: WordRecord) -> List[AudioRequest]:
        stem = simple_stem(record.word)
        requests = [
            AudioRequest(
                text=record.word,
                voice=resolve_voice(record.source_language),
                file_name=f"{stem}{SOURCE_SUFFIX}.mp3",
            )
        ]
        translation = record.primary_translation
        if translation:
            requests.append(
                AudioRequest(
                    text=translation,
                    voice=resolve_voice(record.target_language),
                    file_name=f"{stem}{TARGET_SUFFIX}.mp3",
                )
            )
        return requests

    def process(self, record: WordRecord) -> None:
        results = self._generator.generate(self.build_requests(record))
        source_file: Optional[str] = None
        target_file: Optional[str] = None
        for result in results:
            if not result.succeeded:
                raise RuntimeError(result.error or f"Audio generation failed for {result.file_name}")
            if SOURCE_SUFFIX in result.file_name:
                source_file = result.file_name
            elif TARGET_SUFFIX in result.file_name:
                target_file = result.file_name
        self._store.update_audio(record.id, source_file=source_file, target_file=target_file)


__all__ = ["AudioWorker"]
