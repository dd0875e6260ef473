"""Submit, retry, cancel and download translation sessions."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .. import logging_manager
from ..config_manager import get_settings
from ..workers.pool import WorkerPool
from .bundler import AssetBundler
from .lifecycle import apply_cancel_transition, apply_retry_transition
from .models import BatchRequest, SessionRecord, SessionStatus, SessionTransitionError
from .orchestrator import BatchOrchestrator
from .store import SessionStore

logger = logging_manager.get_logger().getChild("sessions.manager")


class SessionManager:
    """Coordinate session lifecycle and run batches on a bounded executor."""

    def __init__(
        self,
        session_store: SessionStore,
        orchestrator: BatchOrchestrator,
        bundler: AssetBundler,
        *,
        max_workers: Optional[int] = None,
        pool: Optional[WorkerPool] = None,
    ) -> None:
        self._store = session_store
        self._orchestrator = orchestrator
        self._bundler = bundler
        self._pool = pool or WorkerPool(
            "session",
            max_workers=max_workers or get_settings().session_max_workers,
        )
        self._lock = threading.RLock()
        self._futures: Dict[int, Future] = {}

    def submit(self, request: Union[BatchRequest, Mapping[str, Any]]) -> SessionRecord:
        """Create a PENDING session for ``request`` and schedule its processing."""

        if not isinstance(request, BatchRequest):
            request = BatchRequest.model_validate(request)
        session = self._store.create(SessionRecord.for_request(request))
        logger.info(
            "Submitted session %s with %s words",
            session.id,
            len(request.source_words),
            extra={"event": "session.submitted", "session_id": session.id},
        )
        self._schedule(session.id, request, session.retry_count)
        return session

    def retry(self, session_id: int) -> SessionRecord:
        """Re-run a FAILED or CANCELLED session from its stored request."""

        session = self._store.mutate(session_id, apply_retry_transition)
        logger.info(
            "Retrying session %s (attempt %s)",
            session_id,
            session.retry_count,
            extra={"event": "session.retried", "session_id": session_id},
        )
        self._schedule(session_id, session.payload.original_request, session.retry_count)
        return session

    def cancel(self, session_id: int, reason: Optional[str] = None) -> SessionRecord:
        session = self._store.mutate(
            session_id, lambda record: apply_cancel_transition(record, reason)
        )
        logger.info(
            "Cancelled session %s: %s",
            session_id,
            session.cancellation_reason,
            extra={"event": "session.cancel_requested", "session_id": session_id},
        )
        return session

    def get(self, session_id: int) -> SessionRecord:
        return self._store.get(session_id)

    def list(self, status: Optional[SessionStatus] = None) -> List[SessionRecord]:
        return self._store.list(status)

    def download(self, session_id: int) -> Path:
        """Regenerate the archive of a COMPLETED session and return its path."""

        session = self._store.get(session_id)
        if session.status is not SessionStatus.COMPLETED:
            raise SessionTransitionError(
                session_id,
                session,
                f"Session {session_id} is {session.status.value}; only completed sessions can be downloaded",
            )
        path = self._bundler.create_session_zip(session, session.payload)

        def remember(record: SessionRecord) -> None:
            record.zip_file_path = str(path)

        self._store.mutate(session_id, remember)
        return path

    def wait(self, session_id: int, timeout: Optional[float] = None) -> SessionRecord:
        """Block until the scheduled run of ``session_id`` finishes."""

        with self._lock:
            future = self._futures.get(int(session_id))
        if future is not None:
            future.result(timeout=timeout)
        return self._store.get(session_id)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def _schedule(self, session_id: int, request: BatchRequest, attempt: int) -> Future:
        future = self._pool.submit(self._orchestrator.process, session_id, request, attempt)
        with self._lock:
            self._futures[int(session_id)] = future
        return future


__all__ = ["SessionManager"]
