"""Translation session model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base, TimestampMixin


class TranslationSessionModel(TimestampMixin, Base):
    __tablename__ = "translation_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word: Mapped[str] = mapped_column(String(255), nullable=False)
    source_language: Mapped[str] = mapped_column(String(16), nullable=False)
    target_language: Mapped[str] = mapped_column(String(16), nullable=False)
    enable_translation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enable_audio: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enable_image: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    enable_sentence: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    override_translation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    session_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    zip_file_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_translation_sessions_status", "status"),
        Index("idx_translation_sessions_created", "created_at"),
    )
