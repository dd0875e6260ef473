"""Routes for batch session lifecycle management."""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import FileResponse

from ...sessions.manager import SessionManager
from ...sessions.models import BatchRequest, SessionRecord, SessionStatus, SessionTransitionError
from ..dependencies import get_session_manager
from ..schemas import (
    SessionCancelRequest,
    SessionListResponse,
    SessionResponse,
    SessionSubmissionResponse,
)

router = APIRouter()


def _handle_session_action(
    session_id: int, action: Callable[..., SessionRecord], *args
) -> SessionResponse:
    try:
        session = action(session_id, *args)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found") from exc
    except SessionTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return SessionResponse.from_record(session)


@router.post("", response_model=SessionSubmissionResponse, status_code=status.HTTP_202_ACCEPTED)
def submit_session(
    payload: BatchRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """Create a session for ``payload`` and start processing it in the background."""

    session = manager.submit(payload)
    return SessionSubmissionResponse(
        session_id=session.id,
        status=session.status,
        created_at=session.created_at,
    )


@router.get("", response_model=SessionListResponse)
def list_sessions(
    status_filter: Optional[SessionStatus] = Query(None, alias="status"),
    manager: SessionManager = Depends(get_session_manager),
):
    sessions = manager.list(status_filter)
    return SessionListResponse(sessions=[SessionResponse.from_record(s) for s in sessions])


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: int,
    manager: SessionManager = Depends(get_session_manager),
):
    return _handle_session_action(session_id, manager.get)


@router.post("/{session_id}/retry", response_model=SessionResponse)
def retry_session(
    session_id: int,
    manager: SessionManager = Depends(get_session_manager),
):
    """Re-run a failed or cancelled session from its stored request."""

    return _handle_session_action(session_id, manager.retry)


@router.post("/{session_id}/cancel", response_model=SessionResponse)
def cancel_session(
    session_id: int,
    payload: Optional[SessionCancelRequest] = Body(None),
    manager: SessionManager = Depends(get_session_manager),
):
    reason = payload.reason if payload is not None else None
    return _handle_session_action(session_id, manager.cancel, reason)


@router.get("/{session_id}/download")
def download_session(
    session_id: int,
    manager: SessionManager = Depends(get_session_manager),
):
    """Regenerate and stream the asset archive of a completed session."""

    try:
        path = manager.download(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found") from exc
    except SessionTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return FileResponse(path, media_type="application/zip", filename=path.name)


__all__ = ["router"]
