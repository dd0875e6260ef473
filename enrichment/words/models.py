"""In-memory representations of enriched words and their variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .status import ProcessingStatus, Stage, derive_overall_status


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VariantKind(str, Enum):
    """Artifact families that keep a history of generated variants."""

    TRANSLATION = "translation"
    MNEMONIC = "mnemonic"
    IMAGE = "image"
    SENTENCE = "sentence"


@dataclass
class WordRecord:
    """Authoritative per-word state shared by every enrichment stage."""

    id: int
    word: str
    source_language: str
    target_language: str
    translations: List[str] = field(default_factory=list)
    transliteration: Optional[str] = None
    audio_source_file: Optional[str] = None
    audio_target_file: Optional[str] = None
    image_file: Optional[str] = None
    image_prompt: Optional[str] = None
    mnemonic_keyword: Optional[str] = None
    mnemonic_sentence: Optional[str] = None
    character_guide_id: Optional[int] = None
    translation_override_at: Optional[datetime] = None
    translation_status: ProcessingStatus = ProcessingStatus.PENDING
    audio_status: ProcessingStatus = ProcessingStatus.PENDING
    image_status: ProcessingStatus = ProcessingStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.word, self.source_language, self.target_language)

    @property
    def has_translation(self) -> bool:
        return any(item.strip() for item in self.translations)

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_source_file or self.audio_target_file)

    @property
    def has_image(self) -> bool:
        return bool(self.image_file)

    @property
    def primary_translation(self) -> Optional[str]:
        for item in self.translations:
            if item.strip():
                return item
        return None

    def stage_status(self, stage: Stage) -> ProcessingStatus:
        return getattr(self, _STAGE_FIELDS[Stage(stage)])

    def overall_status(self) -> ProcessingStatus:
        return derive_overall_status(
            (self.translation_status, self.audio_status, self.image_status)
        )


_STAGE_FIELDS: Dict[Stage, str] = {
    Stage.TRANSLATION: "translation_status",
    Stage.AUDIO: "audio_status",
    Stage.IMAGE: "image_status",
}


def stage_field(stage: Stage) -> str:
    """Return the :class:`WordRecord` attribute holding ``stage``'s status."""

    return _STAGE_FIELDS[Stage(stage)]


@dataclass
class WordVariant:
    """One historical instance of a generated artifact for a word."""

    id: int
    word_id: int
    kind: VariantKind
    payload: Dict[str, Any]
    is_current: bool = False
    user_created: bool = False
    created_at: datetime = field(default_factory=_utcnow)


def normalize_translations(values: Any) -> List[str]:
    """Return a de-duplicated, order-preserving list of non-blank translations."""

    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        cleaned = value.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


def word_status_snapshot(record: WordRecord) -> Dict[str, Any]:
    """Return the public status payload for ``record``."""

    return {
        "wordId": record.id,
        "word": record.word,
        "sourceLanguage": record.source_language,
        "targetLanguage": record.target_language,
        "translationStatus": record.translation_status.value,
        "audioGenerationStatus": record.audio_status.value,
        "imageGenerationStatus": record.image_status.value,
        "hasTranslation": record.has_translation,
        "hasAudio": record.has_audio,
        "hasImage": record.has_image,
        "overallStatus": record.overall_status().value,
    }


__all__ = [
    "VariantKind",
    "WordRecord",
    "WordVariant",
    "normalize_translations",
    "stage_field",
    "word_status_snapshot",
]
