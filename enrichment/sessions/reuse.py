"""Find previously computed results for a word before doing new work."""

from __future__ import annotations

from typing import Optional

from .. import logging_manager
from ..words.models import WordRecord
from ..words.store import WordStatusStore
from .models import SessionStatus, WordResult, utcnow_iso
from .store import SessionStore

logger = logging_manager.get_logger().getChild("sessions.reuse")

TRANSLATION_SUCCESS = "success"


def result_from_record(record: WordRecord) -> WordResult:
    """Build a reused :class:`WordResult` from a stored word record."""

    timestamp = record.updated_at.isoformat() if record.updated_at else utcnow_iso()
    return WordResult(
        source_word=record.word,
        translation_status=TRANSLATION_SUCCESS,
        translations=list(record.translations),
        source_transliteration=record.transliteration,
        translation_override=record.translation_override_at is not None,
        source_audio_file=record.audio_source_file,
        target_audio_files=[record.audio_target_file] if record.audio_target_file else [],
        image_status=TRANSLATION_SUCCESS if record.image_file else None,
        image_file=record.image_file,
        image_prompt=record.image_prompt,
        mnemonic_keyword=record.mnemonic_keyword,
        mnemonic_sentence=record.mnemonic_sentence,
        reused=True,
        reused_timestamp=timestamp,
    )


class DedupResolver:
    """Resolve a word to an existing result from the word store or past sessions."""

    def __init__(self, word_store: WordStatusStore, session_store: SessionStore) -> None:
        self._words = word_store
        self._sessions = session_store

    def resolve(
        self, word: str, source_language: str, target_language: str
    ) -> Optional[WordResult]:
        record = self._words.find(word, source_language, target_language)
        if record is not None and record.has_translation:
            logger.debug(
                "Reusing stored word record %s for %r",
                record.id,
                word,
                extra={"event": "reuse.word_record"},
            )
            return result_from_record(record)
        return self._from_sessions(word.strip(), source_language, target_language)

    def _from_sessions(
        self, word: str, source_language: str, target_language: str
    ) -> Optional[WordResult]:
        for session in self._sessions.list(SessionStatus.COMPLETED):
            if (
                session.source_language != source_language
                or session.target_language != target_language
            ):
                continue
            for result in session.payload.words:
                if (
                    result.source_word.strip() == word
                    and result.translation_status == TRANSLATION_SUCCESS
                ):
                    logger.debug(
                        "Reusing result for %r from session %s",
                        word,
                        session.id,
                        extra={"event": "reuse.session"},
                    )
                    reused = result.model_copy(deep=True)
                    reused.reused = True
                    reused.reused_timestamp = (
                        session.updated_at.isoformat() if session.updated_at else utcnow_iso()
                    )
                    return reused
        return None


__all__ = ["DedupResolver", "TRANSLATION_SUCCESS", "result_from_record"]
