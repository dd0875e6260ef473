from __future__ import annotations

import zipfile

import pytest

from enrichment.sessions.models import SessionRecord, SessionStatus, SessionTransitionError


def test_submit_runs_batch_in_background(manager) -> None:
    session = manager.submit(
        {"source_words": ["perro"], "source_language": "es", "target_language": "en"}
    )

    assert session.status is SessionStatus.PENDING
    finished = manager.wait(session.id, timeout=10)
    assert finished.status is SessionStatus.COMPLETED
    assert finished.payload.words[0].translations == ["dog"]
    assert [s.id for s in manager.list(SessionStatus.COMPLETED)] == [session.id]


def test_download_regenerates_archive(manager) -> None:
    session = manager.submit(
        {"source_words": ["perro"], "source_language": "es", "target_language": "en"}
    )
    manager.wait(session.id, timeout=10)

    path = manager.download(session.id)

    assert path.is_file()
    assert manager.get(session.id).zip_file_path == str(path)
    with zipfile.ZipFile(path) as archive:
        assert f"session_{session.id}_metadata.txt" in archive.namelist()


def test_download_requires_completed_session(manager, session_store, make_request) -> None:
    session = session_store.create(SessionRecord.for_request(make_request("perro")))

    with pytest.raises(SessionTransitionError):
        manager.download(session.id)
    with pytest.raises(KeyError):
        manager.download(999)


def test_retry_reprocesses_failed_session(manager, session_store, make_request) -> None:
    record = SessionRecord.for_request(make_request("perro"))
    record.status = SessionStatus.FAILED
    record.payload.error = "previous failure"
    session = session_store.create(record)

    retried = manager.retry(session.id)

    assert retried.status is SessionStatus.IN_PROGRESS
    assert retried.retry_count == 1
    assert retried.payload.error is None
    finished = manager.wait(session.id, timeout=10)
    assert finished.status is SessionStatus.COMPLETED
    assert finished.retry_count == 1


def test_completed_session_cannot_be_cancelled_or_retried(manager) -> None:
    session = manager.submit(
        {"source_words": ["perro"], "source_language": "es", "target_language": "en"}
    )
    manager.wait(session.id, timeout=10)

    with pytest.raises(SessionTransitionError):
        manager.cancel(session.id, "late")
    with pytest.raises(SessionTransitionError):
        manager.retry(session.id)


def test_cancel_pending_session(manager, session_store, make_request) -> None:
    session = session_store.create(SessionRecord.for_request(make_request("perro")))

    cancelled = manager.cancel(session.id)

    assert cancelled.status is SessionStatus.CANCELLED
    assert cancelled.cancellation_reason == "Cancelled by user"


def test_retry_without_stored_request_is_rejected(manager, session_store, make_request) -> None:
    record = SessionRecord.for_request(make_request("perro"))
    record.status = SessionStatus.FAILED
    record.payload.original_request = None
    session = session_store.create(record)

    with pytest.raises(SessionTransitionError):
        manager.retry(session.id)

    assert manager.get(session.id).status is SessionStatus.FAILED
    assert manager.get(session.id).retry_count == 0
