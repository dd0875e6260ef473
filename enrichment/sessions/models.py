"""Typed representations of translation sessions and their payload."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..generators.capabilities import ImageStyle
from ..generators.voices import VoiceConfig, VoiceGender, resolve_voice

SESSION_SCHEMA_VERSION = 1
DEFAULT_CANCELLATION_REASON = "Cancelled by user"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    return utcnow().isoformat()


class SessionStatus(str, Enum):
    """Enumeration of possible session states."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class BatchRequest(BaseModel):
    """Configuration for one batch of words; persisted verbatim for retries."""

    model_config = ConfigDict(extra="ignore")

    source_words: List[str]
    source_language: str
    target_language: str
    source_language_code: Optional[str] = None
    target_language_code: Optional[str] = None
    enable_translation: bool = True
    enable_source_audio: bool = True
    enable_target_audio: bool = True
    source_audio_language_code: Optional[str] = None
    target_audio_language_code: Optional[str] = None
    source_voice_gender: VoiceGender = VoiceGender.NEUTRAL
    target_voice_gender: VoiceGender = VoiceGender.NEUTRAL
    source_voice_name: Optional[str] = None
    target_voice_name: Optional[str] = None
    enable_sentence_generation: bool = False
    enable_image_generation: bool = False
    override_translation: bool = False
    image_style: ImageStyle = ImageStyle.REALISTIC_CINEMATIC

    @field_validator("source_words")
    @classmethod
    def _clean_words(cls, value: List[str]) -> List[str]:
        words = [word.strip() for word in value if isinstance(word, str) and word.strip()]
        if not words:
            raise ValueError("source_words must contain at least one non-blank word")
        return words

    @field_validator("source_language", "target_language")
    @classmethod
    def _require_language(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("language must not be blank")
        return cleaned

    @property
    def enable_audio(self) -> bool:
        return self.enable_source_audio or self.enable_target_audio

    @property
    def translation_source_code(self) -> str:
        return self.source_language_code or self.source_language

    @property
    def translation_target_code(self) -> str:
        return self.target_language_code or self.target_language

    def _voice(
        self, language: str, code: Optional[str], gender: VoiceGender, name: Optional[str]
    ) -> VoiceConfig:
        base = resolve_voice(language)
        return VoiceConfig(
            language_code=code or base.language_code,
            gender=gender,
            voice_name=name or base.voice_name,
        )

    def source_voice(self) -> VoiceConfig:
        return self._voice(
            self.source_language,
            self.source_audio_language_code,
            self.source_voice_gender,
            self.source_voice_name,
        )

    def target_voice(self) -> VoiceConfig:
        return self._voice(
            self.target_language,
            self.target_audio_language_code,
            self.target_voice_gender,
            self.target_voice_name,
        )


class WordResult(BaseModel):
    """Per-word outcome recorded in a session payload."""

    model_config = ConfigDict(extra="ignore")

    source_word: str
    translation_status: Optional[str] = None
    translation_error: Optional[str] = None
    translations: List[str] = Field(default_factory=list)
    source_transliteration: Optional[str] = None
    translation_override: bool = False
    source_audio_file: Optional[str] = None
    target_audio_files: List[str] = Field(default_factory=list)
    sentence_data: Optional[Dict[str, Any]] = None
    sentence_status: Optional[str] = None
    sentence_error: Optional[str] = None
    sentence_audio_file: Optional[str] = None
    image_status: Optional[str] = None
    image_error: Optional[str] = None
    image_file: Optional[str] = None
    image_local_path: Optional[str] = None
    image_prompt: Optional[str] = None
    mnemonic_keyword: Optional[str] = None
    mnemonic_sentence: Optional[str] = None
    reused: bool = False
    reused_timestamp: Optional[str] = None


class ProcessSummary(BaseModel):
    """Categorized errors and audio counters for a finished batch."""

    translation_errors: List[str] = Field(default_factory=list)
    audio_errors: List[str] = Field(default_factory=list)
    image_errors: List[str] = Field(default_factory=list)
    sentence_errors: List[str] = Field(default_factory=list)
    audio_success_count: int = 0
    audio_failure_count: int = 0
    has_errors: bool = False

    def refresh(self) -> "ProcessSummary":
        self.has_errors = bool(
            self.translation_errors
            or self.audio_errors
            or self.image_errors
            or self.sentence_errors
        )
        return self

    def clear_errors(self) -> None:
        self.translation_errors = []
        self.audio_errors = []
        self.image_errors = []
        self.sentence_errors = []
        self.has_errors = False


class DedupStats(BaseModel):
    reused_count: int = 0
    new_count: int = 0
    total_count: int = 0

    @classmethod
    def from_results(cls, results: List[WordResult]) -> "DedupStats":
        reused = sum(1 for result in results if result.reused)
        return cls(
            reused_count=reused,
            new_count=len(results) - reused,
            total_count=len(results),
        )


class SessionPayload(BaseModel):
    """Versioned document holding a session's progress and results."""

    model_config = ConfigDict(extra="ignore")

    schema_version: Literal[1] = SESSION_SCHEMA_VERSION
    words: List[WordResult] = Field(default_factory=list)
    total_words: Optional[int] = None
    processed_words: Optional[int] = None
    processing: bool = False
    last_update: Optional[str] = None
    source_language: Optional[str] = None
    target_language: Optional[str] = None
    audio_files: List[str] = Field(default_factory=list)
    process_summary: Optional[ProcessSummary] = None
    original_request: Optional[BatchRequest] = None
    dedup_stats: Optional[DedupStats] = None
    error: Optional[str] = None
    error_time: Optional[str] = None
    cancelled: bool = False
    cancellation_time: Optional[str] = None
    cancellation_reason: Optional[str] = None
    retry_count: int = 0
    last_retry_time: Optional[str] = None

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, payload: Optional[str]) -> "SessionPayload":
        if not payload:
            return cls()
        return cls.model_validate_json(payload)


@dataclass
class SessionRecord:
    """State of one user-submitted batch, tracked end to end."""

    id: Optional[int]
    word: str
    source_language: str
    target_language: str
    enable_translation: bool = True
    enable_audio: bool = True
    enable_image: bool = False
    enable_sentence: bool = False
    override_translation: bool = False
    status: SessionStatus = SessionStatus.PENDING
    payload: SessionPayload = field(default_factory=SessionPayload)
    zip_file_path: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    @classmethod
    def for_request(cls, request: BatchRequest) -> "SessionRecord":
        return cls(
            id=None,
            word=request.source_words[0],
            source_language=request.source_language,
            target_language=request.target_language,
            enable_translation=request.enable_translation,
            enable_audio=request.enable_audio,
            enable_image=request.enable_image_generation,
            enable_sentence=request.enable_sentence_generation,
            override_translation=request.override_translation,
            payload=SessionPayload(
                total_words=len(request.source_words),
                processed_words=0,
                source_language=request.source_language,
                target_language=request.target_language,
                original_request=request,
            ),
        )

    @property
    def retry_count(self) -> int:
        return self.payload.retry_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "word": self.word,
            "source_language": self.source_language,
            "target_language": self.target_language,
            "enable_translation": self.enable_translation,
            "enable_audio": self.enable_audio,
            "enable_image": self.enable_image,
            "enable_sentence": self.enable_sentence,
            "override_translation": self.override_translation,
            "status": self.status.value,
            "zip_file_path": self.zip_file_path if self.status is SessionStatus.COMPLETED else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "cancellation_reason": self.cancellation_reason,
            "payload": self.payload.model_dump(mode="json"),
        }


class SessionTransitionError(ValueError):
    """Raised when an invalid state transition is requested for a session."""

    def __init__(self, session_id: Optional[int], session: SessionRecord, message: str) -> None:
        super().__init__(message)
        self.session_id = session_id
        self.session = session


__all__ = [
    "BatchRequest",
    "DEFAULT_CANCELLATION_REASON",
    "DedupStats",
    "ProcessSummary",
    "SESSION_SCHEMA_VERSION",
    "SessionPayload",
    "SessionRecord",
    "SessionStatus",
    "SessionTransitionError",
    "WordResult",
    "utcnow",
    "utcnow_iso",
]
