"""Word models: enriched words and their variant history."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..base import Base, TimestampMixin
from .types import JSONDocument


class WordModel(TimestampMixin, Base):
    __tablename__ = "words"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word: Mapped[str] = mapped_column(String(255), nullable=False)
    source_language: Mapped[str] = mapped_column(String(16), nullable=False)
    target_language: Mapped[str] = mapped_column(String(16), nullable=False)
    translations: Mapped[list] = mapped_column(JSONDocument, nullable=False, default=list)
    transliteration: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    audio_source_file: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    audio_target_file: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_file: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mnemonic_keyword: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mnemonic_sentence: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    character_guide_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    translation_override_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
    translation_status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    audio_status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    image_status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")

    variants: Mapped[list[WordVariantModel]] = relationship(
        back_populates="word", cascade="all, delete-orphan", order_by="WordVariantModel.id"
    )

    __table_args__ = (
        UniqueConstraint(
            "word", "source_language", "target_language", name="uq_words_word_languages"
        ),
    )


class WordVariantModel(Base):
    __tablename__ = "word_variants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("words.id", ondelete="CASCADE"),
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        default=func.now(),
        server_default=func.now(),
    )

    word: Mapped[WordModel] = relationship(back_populates="variants")

    __table_args__ = (
        Index("idx_word_variants_word_kind", "word_id", "kind"),
    )
