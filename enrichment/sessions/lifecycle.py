"""Helpers for validating and applying translation session transitions."""

from __future__ import annotations

from typing import Optional

from .models import (
    DEFAULT_CANCELLATION_REASON,
    ProcessSummary,
    SessionRecord,
    SessionStatus,
    SessionTransitionError,
    utcnow,
    utcnow_iso,
)

_CANCELLABLE_STATES = {SessionStatus.PENDING, SessionStatus.IN_PROGRESS}
_RETRYABLE_STATES = {SessionStatus.FAILED, SessionStatus.CANCELLED}


def _reject(session: SessionRecord, message: str) -> SessionTransitionError:
    return SessionTransitionError(session.id, session, message)


def apply_start_transition(session: SessionRecord) -> None:
    """Move ``session`` to IN_PROGRESS and reset its progress counters."""

    if session.status not in _CANCELLABLE_STATES:
        raise _reject(
            session,
            f"Cannot start session {session.id} from state {session.status.value}",
        )
    payload = session.payload
    request = payload.original_request
    payload.total_words = len(request.source_words) if request is not None else payload.total_words
    payload.processed_words = 0
    payload.processing = True
    payload.words = []
    payload.last_update = utcnow_iso()
    session.status = SessionStatus.IN_PROGRESS
    session.updated_at = utcnow()


def apply_cancel_transition(session: SessionRecord, reason: Optional[str] = None) -> None:
    """Validate and persist state changes required to cancel ``session``."""

    if session.status not in _CANCELLABLE_STATES:
        raise _reject(
            session,
            f"Cannot cancel session {session.id} in state {session.status.value}",
        )
    cleaned = (reason or "").strip() or DEFAULT_CANCELLATION_REASON
    now = utcnow()
    session.status = SessionStatus.CANCELLED
    session.cancelled_at = now
    session.cancellation_reason = cleaned
    session.updated_at = now
    payload = session.payload
    payload.cancelled = True
    payload.cancellation_time = now.isoformat()
    payload.cancellation_reason = cleaned
    payload.processing = False


def apply_retry_transition(session: SessionRecord) -> None:
    """Reset a failed or cancelled ``session`` so it can be processed again."""

    if session.status not in _RETRYABLE_STATES:
        raise _reject(
            session,
            f"Cannot retry session {session.id} from state {session.status.value}",
        )
    payload = session.payload
    if payload.original_request is None:
        raise _reject(
            session,
            f"Session {session.id} has no stored request to retry",
        )
    now = utcnow()
    payload.error = None
    payload.error_time = None
    payload.cancelled = False
    payload.cancellation_time = None
    payload.cancellation_reason = None
    if payload.process_summary is not None:
        payload.process_summary.clear_errors()
    else:
        payload.process_summary = ProcessSummary()
    payload.retry_count += 1
    payload.last_retry_time = now.isoformat()
    payload.processing = True
    payload.last_update = now.isoformat()
    session.cancelled_at = None
    session.cancellation_reason = None
    session.completed_at = None
    session.zip_file_path = None
    session.status = SessionStatus.IN_PROGRESS
    session.updated_at = now


def apply_failure(session: SessionRecord, error: str) -> None:
    """Mark an IN_PROGRESS ``session`` FAILED with ``error``."""

    if session.status is not SessionStatus.IN_PROGRESS:
        raise _reject(
            session,
            f"Cannot fail session {session.id} from state {session.status.value}",
        )
    now = utcnow()
    session.status = SessionStatus.FAILED
    session.completed_at = now
    session.updated_at = now
    session.payload.error = error
    session.payload.error_time = now.isoformat()
    session.payload.processing = False


def apply_completion(session: SessionRecord, zip_file_path: Optional[str]) -> None:
    """Mark ``session`` COMPLETED unless it left IN_PROGRESS meanwhile."""

    if session.status is not SessionStatus.IN_PROGRESS:
        raise _reject(
            session,
            f"Cannot complete session {session.id} from state {session.status.value}",
        )
    now = utcnow()
    session.status = SessionStatus.COMPLETED
    session.zip_file_path = zip_file_path
    session.completed_at = now
    session.updated_at = now
    session.payload.processing = False
    session.payload.last_update = now.isoformat()


def is_current_run(session: SessionRecord, attempt: int) -> bool:
    """Return ``True`` while ``session`` is still running ``attempt``.

    A cancel ends the attempt; a retry starts a new one, so a run that
    outlived its attempt must stop writing to the session.
    """

    return (
        session.status in _CANCELLABLE_STATES
        and session.payload.retry_count == attempt
    )


__all__ = [
    "apply_cancel_transition",
    "apply_completion",
    "apply_failure",
    "apply_retry_transition",
    "apply_start_transition",
    "is_current_run",
]
