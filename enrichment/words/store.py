"""Storage backends for word records and their variant history."""

from __future__ import annotations

import copy
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from .. import logging_manager
from .models import (
    VariantKind,
    WordRecord,
    WordVariant,
    normalize_translations,
    stage_field,
)
from .status import ProcessingStatus, Stage, StatusTransitionError, transition

logger = logging_manager.get_logger().getChild("words.store")


class WordStatusStore(Protocol):
    """Read/write contract shared by the pipeline stages."""

    def get(self, word_id: int) -> WordRecord:
        ...

    def find(
        self, word: str, source_language: str, target_language: str
    ) -> Optional[WordRecord]:
        ...

    def get_or_create(
        self, word: str, source_language: str, target_language: str
    ) -> WordRecord:
        ...

    def set_stage_status(
        self, word_id: int, stage: Stage, status: ProcessingStatus
    ) -> WordRecord:
        ...

    def update_translation(
        self, word_id: int, translations: Iterable[str], *, override: bool = False
    ) -> WordRecord:
        ...

    def update_transliteration(
        self, word_id: int, transliteration: Optional[str]
    ) -> WordRecord:
        ...

    def update_audio(
        self,
        word_id: int,
        *,
        source_file: Optional[str] = None,
        target_file: Optional[str] = None,
    ) -> WordRecord:
        ...

    def update_mnemonic(
        self,
        word_id: int,
        keyword: Optional[str],
        sentence: Optional[str],
        *,
        character_guide_id: Optional[int] = None,
    ) -> WordRecord:
        ...

    def update_image(
        self, word_id: int, image_file: Optional[str], image_prompt: Optional[str]
    ) -> WordRecord:
        ...

    def list(self) -> List[WordRecord]:
        ...

    def add_variant(
        self,
        word_id: int,
        kind: VariantKind,
        payload: Mapping[str, Any],
        *,
        set_current: bool = True,
        user_created: bool = False,
    ) -> WordVariant:
        ...

    def current_variant(self, word_id: int, kind: VariantKind) -> Optional[WordVariant]:
        ...

    def variant_history(self, word_id: int, kind: VariantKind) -> List[WordVariant]:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


class InMemoryWordStore(WordStatusStore):
    """Process-local store used in disconnected mode and by the tests."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: Dict[int, WordRecord] = {}
        self._index: Dict[Tuple[str, str, str], int] = {}
        self._variants: Dict[int, List[WordVariant]] = {}
        self._next_word_id = 1
        self._next_variant_id = 1

    def _require(self, word_id: int) -> WordRecord:
        try:
            return self._records[int(word_id)]
        except KeyError as exc:
            raise KeyError(word_id) from exc

    def get(self, word_id: int) -> WordRecord:
        with self._lock:
            return copy.deepcopy(self._require(word_id))

    def find(
        self, word: str, source_language: str, target_language: str
    ) -> Optional[WordRecord]:
        key = (word.strip(), source_language, target_language)
        with self._lock:
            word_id = self._index.get(key)
            if word_id is None:
                return None
            return copy.deepcopy(self._records[word_id])

    def get_or_create(
        self, word: str, source_language: str, target_language: str
    ) -> WordRecord:
        key = (word.strip(), source_language, target_language)
        with self._lock:
            word_id = self._index.get(key)
            if word_id is None:
                word_id = self._next_word_id
                self._next_word_id += 1
                self._records[word_id] = WordRecord(
                    id=word_id,
                    word=key[0],
                    source_language=source_language,
                    target_language=target_language,
                )
                self._index[key] = word_id
            return copy.deepcopy(self._records[word_id])

    def set_stage_status(
        self, word_id: int, stage: Stage, status: ProcessingStatus
    ) -> WordRecord:
        attribute = stage_field(stage)
        with self._lock:
            record = self._require(word_id)
            current = getattr(record, attribute)
            setattr(record, attribute, transition(current, status))
            record.updated_at = _utcnow()
            return copy.deepcopy(record)

    def update_translation(
        self, word_id: int, translations: Iterable[str], *, override: bool = False
    ) -> WordRecord:
        with self._lock:
            record = self._require(word_id)
            record.translations = normalize_translations(translations)
            if override:
                record.translation_override_at = _utcnow()
            record.updated_at = _utcnow()
            return copy.deepcopy(record)

    def update_transliteration(
        self, word_id: int, transliteration: Optional[str]
    ) -> WordRecord:
        with self._lock:
            record = self._require(word_id)
            record.transliteration = _clean(transliteration)
            record.updated_at = _utcnow()
            return copy.deepcopy(record)

    def update_audio(
        self,
        word_id: int,
        *,
        source_file: Optional[str] = None,
        target_file: Optional[str] = None,
    ) -> WordRecord:
        with self._lock:
            record = self._require(word_id)
            if source_file:
                record.audio_source_file = source_file
            if target_file:
                record.audio_target_file = target_file
            record.updated_at = _utcnow()
            return copy.deepcopy(record)

    def update_mnemonic(
        self,
        word_id: int,
        keyword: Optional[str],
        sentence: Optional[str],
        *,
        character_guide_id: Optional[int] = None,
    ) -> WordRecord:
        with self._lock:
            record = self._require(word_id)
            record.mnemonic_keyword = _clean(keyword)
            record.mnemonic_sentence = _clean(sentence)
            if character_guide_id is not None:
                record.character_guide_id = character_guide_id
            record.updated_at = _utcnow()
            return copy.deepcopy(record)

    def update_image(
        self, word_id: int, image_file: Optional[str], image_prompt: Optional[str]
    ) -> WordRecord:
        with self._lock:
            record = self._require(word_id)
            record.image_file = image_file
            record.image_prompt = _clean(image_prompt)
            record.updated_at = _utcnow()
            return copy.deepcopy(record)

    def list(self) -> List[WordRecord]:
        with self._lock:
            return [copy.deepcopy(record) for _, record in sorted(self._records.items())]

    def add_variant(
        self,
        word_id: int,
        kind: VariantKind,
        payload: Mapping[str, Any],
        *,
        set_current: bool = True,
        user_created: bool = False,
    ) -> WordVariant:
        kind = VariantKind(kind)
        with self._lock:
            self._require(word_id)
            arena = self._variants.setdefault(int(word_id), [])
            siblings = [variant for variant in arena if variant.kind is kind]
            is_current = set_current or not any(v.is_current for v in siblings)
            if is_current:
                for sibling in siblings:
                    sibling.is_current = False
            variant = WordVariant(
                id=self._next_variant_id,
                word_id=int(word_id),
                kind=kind,
                payload=dict(payload),
                is_current=is_current,
                user_created=user_created,
            )
            self._next_variant_id += 1
            arena.append(variant)
            return copy.deepcopy(variant)

    def current_variant(self, word_id: int, kind: VariantKind) -> Optional[WordVariant]:
        kind = VariantKind(kind)
        with self._lock:
            for variant in self._variants.get(int(word_id), []):
                if variant.kind is kind and variant.is_current:
                    return copy.deepcopy(variant)
            return None

    def variant_history(self, word_id: int, kind: VariantKind) -> List[WordVariant]:
        kind = VariantKind(kind)
        with self._lock:
            return [
                copy.deepcopy(variant)
                for variant in self._variants.get(int(word_id), [])
                if variant.kind is kind
            ]


def record_stage_status(
    store: WordStatusStore, word_id: int, stage: Stage, status: ProcessingStatus
) -> Optional[WordRecord]:
    """Apply a stage status, tolerating writes that lost a race.

    Concurrent enrichments of one word are last-writer-wins: a rejected
    transition means another writer already settled the stage, so it is
    logged and ``None`` is returned instead of raising.
    """

    try:
        return store.set_stage_status(word_id, stage, status)
    except StatusTransitionError as exc:
        logger.warning(
            "Ignoring %s status %s for word %s: %s",
            stage.value,
            status.value,
            word_id,
            exc,
            extra={"event": "word.status_race", "word_id": word_id},
        )
        return None


__all__ = ["InMemoryWordStore", "WordStatusStore", "record_stage_status"]
