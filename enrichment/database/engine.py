"""SQLAlchemy engine singleton and session helpers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..config_manager import get_database_url as _configured_database_url

_DEFAULT_URL = "sqlite:///enrichment.db"

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_database_url() -> str:
    return _configured_database_url() or _DEFAULT_URL


def build_engine(url: str) -> Engine:
    """Create an engine for ``url`` with pool options suited to its dialect."""

    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return create_engine(
        url,
        pool_size=10,
        max_overflow=5,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False,
    )


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = build_engine(get_database_url())
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Provide a transactional scope bound to ``factory``."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_db_session() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    with session_scope(get_session_factory()) as session:
        yield session


def dispose_engine() -> None:
    """Dispose the global engine and clear the factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def create_schema(engine: Engine | None = None) -> None:
    """Create any missing tables on ``engine`` (migrations remain authoritative)."""
    from . import models  # noqa: F401
    from .base import Base

    Base.metadata.create_all(engine or get_engine())
