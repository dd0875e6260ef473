"""SQLAlchemy-backed implementation of :class:`WordStatusStore`."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from .. import logging_manager
from ..database.engine import get_session_factory, session_scope
from ..database.models.word import WordModel, WordVariantModel
from .models import VariantKind, WordRecord, WordVariant, normalize_translations, stage_field
from .status import ProcessingStatus, Stage, transition
from .store import WordStatusStore

logger = logging_manager.get_logger().getChild("words.sql_store")


class SqlWordStore(WordStatusStore):
    """Persist word records and variants through SQLAlchemy."""

    def __init__(self, session_factory: Optional[sessionmaker[Session]] = None) -> None:
        self._session_factory = session_factory

    def _scope(self):
        return session_scope(self._session_factory or get_session_factory())

    @staticmethod
    def _require(session: Session, word_id: int) -> WordModel:
        model = session.get(WordModel, int(word_id))
        if model is None:
            raise KeyError(word_id)
        return model

    @staticmethod
    def _model_to_record(model: WordModel) -> WordRecord:
        return WordRecord(
            id=model.id,
            word=model.word,
            source_language=model.source_language,
            target_language=model.target_language,
            translations=list(model.translations or []),
            transliteration=model.transliteration,
            audio_source_file=model.audio_source_file,
            audio_target_file=model.audio_target_file,
            image_file=model.image_file,
            image_prompt=model.image_prompt,
            mnemonic_keyword=model.mnemonic_keyword,
            mnemonic_sentence=model.mnemonic_sentence,
            character_guide_id=model.character_guide_id,
            translation_override_at=model.translation_override_at,
            translation_status=ProcessingStatus(model.translation_status),
            audio_status=ProcessingStatus(model.audio_status),
            image_status=ProcessingStatus(model.image_status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _model_to_variant(model: WordVariantModel) -> WordVariant:
        return WordVariant(
            id=model.id,
            word_id=model.word_id,
            kind=VariantKind(model.kind),
            payload=dict(model.payload or {}),
            is_current=bool(model.is_current),
            user_created=bool(model.user_created),
            created_at=model.created_at,
        )

    def _mutate(self, word_id: int, **values: Any) -> WordRecord:
        with self._scope() as session:
            model = self._require(session, word_id)
            for key, value in values.items():
                setattr(model, key, value)
            session.flush()
            return self._model_to_record(model)

    def get(self, word_id: int) -> WordRecord:
        with self._scope() as session:
            return self._model_to_record(self._require(session, word_id))

    def find(
        self, word: str, source_language: str, target_language: str
    ) -> Optional[WordRecord]:
        with self._scope() as session:
            model = session.execute(
                select(WordModel).where(
                    and_(
                        WordModel.word == word.strip(),
                        WordModel.source_language == source_language,
                        WordModel.target_language == target_language,
                    )
                )
            ).scalar_one_or_none()
            return self._model_to_record(model) if model is not None else None

    def get_or_create(
        self, word: str, source_language: str, target_language: str
    ) -> WordRecord:
        existing = self.find(word, source_language, target_language)
        if existing is not None:
            return existing
        try:
            with self._scope() as session:
                model = WordModel(
                    word=word.strip(),
                    source_language=source_language,
                    target_language=target_language,
                    translations=[],
                )
                session.add(model)
                session.flush()
                return self._model_to_record(model)
        except IntegrityError:
            # Another writer created the same triple first.
            logger.debug(
                "Word %s already created concurrently",
                word,
                extra={"event": "word.create.conflict"},
            )
            record = self.find(word, source_language, target_language)
            if record is None:
                raise
            return record

    def set_stage_status(
        self, word_id: int, stage: Stage, status: ProcessingStatus
    ) -> WordRecord:
        attribute = stage_field(stage)
        with self._scope() as session:
            model = self._require(session, word_id)
            current = ProcessingStatus(getattr(model, attribute))
            setattr(model, attribute, transition(current, status).value)
            session.flush()
            return self._model_to_record(model)

    def update_translation(
        self, word_id: int, translations: Iterable[str], *, override: bool = False
    ) -> WordRecord:
        values: dict[str, Any] = {"translations": normalize_translations(translations)}
        if override:
            values["translation_override_at"] = datetime.now(timezone.utc)
        return self._mutate(word_id, **values)

    def update_transliteration(
        self, word_id: int, transliteration: Optional[str]
    ) -> WordRecord:
        cleaned = transliteration.strip() if transliteration else None
        return self._mutate(word_id, transliteration=cleaned or None)

    def update_audio(
        self,
        word_id: int,
        *,
        source_file: Optional[str] = None,
        target_file: Optional[str] = None,
    ) -> WordRecord:
        values: dict[str, Any] = {}
        if source_file:
            values["audio_source_file"] = source_file
        if target_file:
            values["audio_target_file"] = target_file
        return self._mutate(word_id, **values)

    def update_mnemonic(
        self,
        word_id: int,
        keyword: Optional[str],
        sentence: Optional[str],
        *,
        character_guide_id: Optional[int] = None,
    ) -> WordRecord:
        values: dict[str, Any] = {
            "mnemonic_keyword": (keyword or "").strip() or None,
            "mnemonic_sentence": (sentence or "").strip() or None,
        }
        if character_guide_id is not None:
            values["character_guide_id"] = character_guide_id
        return self._mutate(word_id, **values)

    def update_image(
        self, word_id: int, image_file: Optional[str], image_prompt: Optional[str]
    ) -> WordRecord:
        return self._mutate(
            word_id,
            image_file=image_file,
            image_prompt=(image_prompt or "").strip() or None,
        )

    def list(self) -> List[WordRecord]:
        with self._scope() as session:
            models = session.execute(select(WordModel).order_by(WordModel.id)).scalars().all()
            return [self._model_to_record(model) for model in models]

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
        with self._scope() as session:
            self._require(session, word_id)
            has_current = session.execute(
                select(WordVariantModel.id).where(
                    and_(
                        WordVariantModel.word_id == int(word_id),
                        WordVariantModel.kind == kind.value,
                        WordVariantModel.is_current.is_(True),
                    )
                )
            ).first() is not None
            is_current = set_current or not has_current
            if is_current:
                session.execute(
                    update(WordVariantModel)
                    .where(
                        and_(
                            WordVariantModel.word_id == int(word_id),
                            WordVariantModel.kind == kind.value,
                        )
                    )
                    .values(is_current=False)
                )
            model = WordVariantModel(
                word_id=int(word_id),
                kind=kind.value,
                payload=dict(payload),
                is_current=is_current,
                user_created=user_created,
            )
            session.add(model)
            session.flush()
            return self._model_to_variant(model)

    def current_variant(self, word_id: int, kind: VariantKind) -> Optional[WordVariant]:
        kind = VariantKind(kind)
        with self._scope() as session:
            model = session.execute(
                select(WordVariantModel)
                .where(
                    and_(
                        WordVariantModel.word_id == int(word_id),
                        WordVariantModel.kind == kind.value,
                        WordVariantModel.is_current.is_(True),
                    )
                )
                .order_by(WordVariantModel.id.desc())
            ).scalars().first()
            return self._model_to_variant(model) if model is not None else None

    def variant_history(self, word_id: int, kind: VariantKind) -> List[WordVariant]:
        kind = VariantKind(kind)
        with self._scope() as session:
            models = session.execute(
                select(WordVariantModel)
                .where(
                    and_(
                        WordVariantModel.word_id == int(word_id),
                        WordVariantModel.kind == kind.value,
                    )
                )
                .order_by(WordVariantModel.id)
            ).scalars().all()
            return [self._model_to_variant(model) for model in models]


__all__ = ["SqlWordStore"]
