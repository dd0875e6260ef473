"""Pydantic request and response payloads for the HTTP surface."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..sessions.models import SessionPayload, SessionRecord, SessionStatus
from ..words.models import WordRecord, word_status_snapshot


class WordStatusResponse(BaseModel):
    """Per-stage status of one word record."""

    wordId: int
    word: str
    sourceLanguage: str
    targetLanguage: str
    translationStatus: str
    audioGenerationStatus: str
    imageGenerationStatus: str
    hasTranslation: bool
    hasAudio: bool
    hasImage: bool
    overallStatus: str

    @classmethod
    def from_record(cls, record: WordRecord) -> "WordStatusResponse":
        return cls(**word_status_snapshot(record))


class WordStatusListResponse(BaseModel):
    words: List[WordStatusResponse] = Field(default_factory=list)
    missing: List[int] = Field(default_factory=list)


class WordCreateRequest(BaseModel):
    """Request body for registering a word and queueing its translation."""

    model_config = ConfigDict(populate_by_name=True)

    word: str
    source_language: str = Field(alias="sourceLanguage")
    target_language: str = Field(alias="targetLanguage")

    @field_validator("word", "source_language", "target_language")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("must not be blank")
        return cleaned


class WordCreateResponse(BaseModel):
    word: WordStatusResponse
    messageId: Optional[str] = None


class SessionResponse(BaseModel):
    """Serializable view of a :class:`SessionRecord`."""

    id: int
    word: str
    source_language: str
    target_language: str
    status: SessionStatus
    enable_translation: bool
    enable_audio: bool
    enable_image: bool
    enable_sentence: bool
    override_translation: bool
    zip_file_path: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    session_data: SessionPayload

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionResponse":
        return cls(
            id=record.id,
            word=record.word,
            source_language=record.source_language,
            target_language=record.target_language,
            status=record.status,
            enable_translation=record.enable_translation,
            enable_audio=record.enable_audio,
            enable_image=record.enable_image,
            enable_sentence=record.enable_sentence,
            override_translation=record.override_translation,
            zip_file_path=(
                record.zip_file_path if record.status is SessionStatus.COMPLETED else None
            ),
            created_at=record.created_at,
            updated_at=record.updated_at,
            completed_at=record.completed_at,
            cancelled_at=record.cancelled_at,
            cancellation_reason=record.cancellation_reason,
            session_data=record.payload,
        )


class SessionListResponse(BaseModel):
    sessions: List[SessionResponse] = Field(default_factory=list)


class SessionSubmissionResponse(BaseModel):
    """Response payload after submitting a batch."""

    session_id: int
    status: SessionStatus
    created_at: Optional[datetime] = None


class SessionCancelRequest(BaseModel):
    reason: Optional[str] = None


__all__ = [
    "SessionCancelRequest",
    "SessionListResponse",
    "SessionResponse",
    "SessionSubmissionResponse",
    "WordCreateRequest",
    "WordCreateResponse",
    "WordStatusListResponse",
    "WordStatusResponse",
]
