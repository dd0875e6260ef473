"""SQLAlchemy-backed implementation of :class:`SessionStore`."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from ..database.engine import get_session_factory, session_scope
from ..database.models.session import TranslationSessionModel
from .models import SessionPayload, SessionRecord, SessionStatus
from .store import SessionMutator, SessionStore


class SqlSessionStore(SessionStore):
    """Persist sessions in ``translation_sessions`` with the payload as JSON text."""

    def __init__(self, session_factory: Optional[sessionmaker[Session]] = None) -> None:
        self._session_factory = session_factory

    def _scope(self):
        return session_scope(self._session_factory or get_session_factory())

    @staticmethod
    def _model_to_record(model: TranslationSessionModel) -> SessionRecord:
        return SessionRecord(
            id=model.id,
            word=model.word,
            source_language=model.source_language,
            target_language=model.target_language,
            enable_translation=bool(model.enable_translation),
            enable_audio=bool(model.enable_audio),
            enable_image=bool(model.enable_image),
            enable_sentence=bool(model.enable_sentence),
            override_translation=bool(model.override_translation),
            status=SessionStatus(model.status),
            payload=SessionPayload.from_json(model.session_data),
            zip_file_path=model.zip_file_path,
            created_at=model.created_at,
            updated_at=model.updated_at,
            completed_at=model.completed_at,
            cancelled_at=model.cancelled_at,
            cancellation_reason=model.cancellation_reason,
        )

    @staticmethod
    def _apply_record(model: TranslationSessionModel, record: SessionRecord) -> None:
        model.word = record.word
        model.source_language = record.source_language
        model.target_language = record.target_language
        model.enable_translation = record.enable_translation
        model.enable_audio = record.enable_audio
        model.enable_image = record.enable_image
        model.enable_sentence = record.enable_sentence
        model.override_translation = record.override_translation
        model.status = record.status.value
        model.session_data = record.payload.to_json()
        model.zip_file_path = record.zip_file_path
        model.completed_at = record.completed_at
        model.cancelled_at = record.cancelled_at
        model.cancellation_reason = record.cancellation_reason

    def create(self, session: SessionRecord) -> SessionRecord:
        with self._scope() as db:
            model = TranslationSessionModel()
            self._apply_record(model, session)
            db.add(model)
            db.flush()
            db.refresh(model)
            return self._model_to_record(model)

    def get(self, session_id: int) -> SessionRecord:
        with self._scope() as db:
            model = db.get(TranslationSessionModel, int(session_id))
            if model is None:
                raise KeyError(session_id)
            return self._model_to_record(model)

    def list(self, status: Optional[SessionStatus] = None) -> List[SessionRecord]:
        stmt = select(TranslationSessionModel).order_by(
            TranslationSessionModel.created_at.desc(),
            TranslationSessionModel.id.desc(),
        )
        if status is not None:
            stmt = stmt.where(TranslationSessionModel.status == status.value)
        with self._scope() as db:
            return [self._model_to_record(model) for model in db.scalars(stmt)]

    def mutate(self, session_id: int, mutator: SessionMutator) -> SessionRecord:
        with self._scope() as db:
            stmt = (
                select(TranslationSessionModel)
                .where(TranslationSessionModel.id == int(session_id))
                .with_for_update()
            )
            model = db.scalars(stmt).first()
            if model is None:
                raise KeyError(session_id)
            record = self._model_to_record(model)
            mutator(record)
            self._apply_record(model, record)
            db.flush()
            db.refresh(model)
            return self._model_to_record(model)


__all__ = ["SqlSessionStore"]
