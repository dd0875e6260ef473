"""Shared skeleton for the per-stage message handlers."""

from __future__ import annotations

import time
from typing import Optional

from .. import logging_manager
from ..logging_manager import log_context
from ..messaging.message import StreamMessage
from ..words.models import WordRecord
from ..words.status import ProcessingStatus, Stage
from ..words.store import WordStatusStore, record_stage_status

logger = logging_manager.get_logger().getChild("workers")


class StageWorker:
    """Move one stage of one word through PROCESSING to COMPLETED or FAILED.

    Subclasses implement :meth:`process`; any exception it raises marks the
    stage FAILED without touching the other stages.
    """

    stage: Stage

    def __init__(self, store: WordStatusStore) -> None:
        self._store = store

    def __call__(self, message: StreamMessage) -> None:
        self.handle(message)

    def handle(self, message: StreamMessage) -> Optional[ProcessingStatus]:
        """Process ``message`` and return the resulting stage status."""

        event_prefix = f"stage.{self.stage.value}"
        with log_context(word_id=message.word_id, stage=self.stage.value):
            try:
                record = self._store.get(message.word_id)
            except KeyError:
                logger.error(
                    "Word %s not found; dropping %s message",
                    message.word_id,
                    self.stage.value,
                    extra={"event": f"{event_prefix}.missing_word"},
                )
                return None

            reason = self.precondition_failure(record)
            if reason is not None:
                logger.warning(
                    "Skipping %s for word %s: %s",
                    self.stage.value,
                    record.id,
                    reason,
                    extra={"event": f"{event_prefix}.skipped"},
                )
                record_stage_status(self._store, record.id, self.stage, ProcessingStatus.FAILED)
                return ProcessingStatus.FAILED

            record_stage_status(self._store, record.id, self.stage, ProcessingStatus.PROCESSING)
            started = time.perf_counter()
            try:
                self.process(record)
            except Exception as exc:
                logger.error(
                    "%s failed for word %s: %s",
                    self.stage.value.capitalize(),
                    record.id,
                    exc,
                    exc_info=True,
                    extra={"event": f"{event_prefix}.failed"},
                )
                record_stage_status(self._store, record.id, self.stage, ProcessingStatus.FAILED)
                return ProcessingStatus.FAILED

            record_stage_status(self._store, record.id, self.stage, ProcessingStatus.COMPLETED)
            logger.info(
                "%s completed for word %s",
                self.stage.value.capitalize(),
                record.id,
                extra={
                    "event": f"{event_prefix}.completed",
                    "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
                },
            )
            self.after_success(self._store.get(record.id))
            return ProcessingStatus.COMPLETED

    def precondition_failure(self, record: WordRecord) -> Optional[str]:
        return None

    def process(self, record: WordRecord) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def after_success(self, record: WordRecord) -> None:
        return None


__all__ = ["StageWorker"]
