"""Translation stage: translate a word and fan out follow-up stages."""

from __future__ import annotations

from typing import Optional

from .. import logging_manager
from ..generators.capabilities import Translator
from ..messaging.message import StreamMessage
from ..messaging.publisher import WordMessagePublisher
from ..words.models import VariantKind, WordRecord, normalize_translations
from ..words.status import Stage
from ..words.store import WordStatusStore
from .base import StageWorker

logger = logging_manager.get_logger().getChild("workers.translation")


class TranslationWorker(StageWorker):
    stage = Stage.TRANSLATION

    def __init__(
        self,
        store: WordStatusStore,
        translator: Optional[Translator],
        publisher: WordMessagePublisher,
    ) -> None:
        super().__init__(store)
        self._translator = translator
        self._publisher = publisher

    def process(self, record: WordRecord) -> None:
        if record.translation_override_at is not None and record.has_translation:
            logger.info(
                "Keeping manually overridden translation for word %s",
                record.id,
                extra={"event": "stage.translation.override_kept"},
            )
            return
        if self._translator is None:
            raise RuntimeError("Translation service is not configured")
        data = self._translator.translate(
            record.word, record.source_language, record.target_language
        )
        translations = normalize_translations(data.translations)
        if not translations:
            raise ValueError(f"Translator returned no translation for {record.word!r}")
        updated = self._store.update_translation(record.id, translations)
        if data.transliteration:
            self._store.update_transliteration(record.id, data.transliteration)
        self._store.add_variant(
            record.id,
            VariantKind.TRANSLATION,
            {
                "translations": updated.translations,
                "transliteration": data.transliteration,
            },
        )

    def after_success(self, record: WordRecord) -> None:
        self._publisher.publish_follow_ups(StreamMessage.for_record(record))


__all__ = ["TranslationWorker"]
