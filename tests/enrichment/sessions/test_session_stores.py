from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

from enrichment.database.engine import build_engine, create_schema
from enrichment.sessions.lifecycle import apply_cancel_transition
from enrichment.sessions.models import BatchRequest, SessionRecord, SessionStatus
from enrichment.sessions.sql_store import SqlSessionStore
from enrichment.sessions.store import InMemorySessionStore


@pytest.fixture
def sql_session_store(tmp_path: Path):
    engine = build_engine(f"sqlite:///{tmp_path / 'sessions.db'}")
    create_schema(engine)
    yield SqlSessionStore(sessionmaker(bind=engine, expire_on_commit=False))
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    if request.param == "memory":
        return InMemorySessionStore()
    return request.getfixturevalue("sql_session_store")


def _record(word: str = "casa") -> SessionRecord:
    return SessionRecord.for_request(
        BatchRequest(source_words=[word], source_language="es", target_language="en")
    )


def test_create_assigns_ids_and_round_trips_payload(store) -> None:
    first = store.create(_record("casa"))
    second = store.create(_record("perro"))

    loaded = store.get(second.id)
    assert first.id != second.id
    assert loaded.word == "perro"
    assert loaded.status is SessionStatus.PENDING
    assert loaded.payload.original_request.source_words == ["perro"]


def test_get_unknown_session_raises_key_error(store) -> None:
    with pytest.raises(KeyError):
        store.get(404)
    with pytest.raises(KeyError):
        store.mutate(404, lambda record: None)


def test_mutate_persists_changes(store) -> None:
    session = store.create(_record())

    updated = store.mutate(session.id, lambda record: apply_cancel_transition(record, "stop"))

    assert updated.status is SessionStatus.CANCELLED
    reloaded = store.get(session.id)
    assert reloaded.cancellation_reason == "stop"
    assert reloaded.payload.cancelled


def test_mutate_discards_changes_when_mutator_raises(store) -> None:
    session = store.create(_record())

    def broken(record: SessionRecord) -> None:
        record.status = SessionStatus.FAILED
        raise RuntimeError("abort")

    with pytest.raises(RuntimeError):
        store.mutate(session.id, broken)

    assert store.get(session.id).status is SessionStatus.PENDING


def test_list_filters_by_status(store) -> None:
    first = store.create(_record("casa"))
    second = store.create(_record("perro"))
    store.mutate(first.id, apply_cancel_transition)

    assert {s.id for s in store.list()} == {first.id, second.id}
    assert [s.id for s in store.list(SessionStatus.CANCELLED)] == [first.id]
    assert [s.id for s in store.list(SessionStatus.PENDING)] == [second.id]


def test_in_memory_store_returns_copies() -> None:
    store = InMemorySessionStore()
    session = store.create(_record())

    fetched = store.get(session.id)
    fetched.status = SessionStatus.FAILED

    assert store.get(session.id).status is SessionStatus.PENDING
