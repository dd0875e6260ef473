"""Storage backends for translation sessions."""

from __future__ import annotations

import copy
import threading
from typing import Callable, Dict, List, Optional, Protocol

from .models import SessionRecord, SessionStatus, utcnow

SessionMutator = Callable[[SessionRecord], None]


class SessionStore(Protocol):
    """Persistence contract for :class:`SessionRecord` objects."""

    def create(self, session: SessionRecord) -> SessionRecord:
        """Persist a new session and return it with its assigned id."""
        ...

    def get(self, session_id: int) -> SessionRecord:
        ...

    def list(self, status: Optional[SessionStatus] = None) -> List[SessionRecord]:
        ...

    def mutate(self, session_id: int, mutator: SessionMutator) -> SessionRecord:
        """Apply ``mutator`` atomically; nothing is saved when it raises."""
        ...


class InMemorySessionStore(SessionStore):
    """Thread-safe in-memory session store."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: Dict[int, SessionRecord] = {}
        self._next_id = 1

    def create(self, session: SessionRecord) -> SessionRecord:
        with self._lock:
            stored = copy.deepcopy(session)
            stored.id = self._next_id
            self._next_id += 1
            self._records[stored.id] = stored
            return copy.deepcopy(stored)

    def get(self, session_id: int) -> SessionRecord:
        with self._lock:
            try:
                return copy.deepcopy(self._records[int(session_id)])
            except KeyError as exc:
                raise KeyError(session_id) from exc

    def list(self, status: Optional[SessionStatus] = None) -> List[SessionRecord]:
        with self._lock:
            records = [
                copy.deepcopy(record)
                for record in self._records.values()
                if status is None or record.status is status
            ]
        records.sort(key=lambda record: (record.created_at, record.id or 0), reverse=True)
        return records

    def mutate(self, session_id: int, mutator: SessionMutator) -> SessionRecord:
        with self._lock:
            try:
                current = self._records[int(session_id)]
            except KeyError as exc:
                raise KeyError(session_id) from exc
            working = copy.deepcopy(current)
            mutator(working)
            working.updated_at = utcnow()
            self._records[int(session_id)] = working
            return copy.deepcopy(working)


__all__ = ["InMemorySessionStore", "SessionMutator", "SessionStore"]
