"""SQLAlchemy database layer for the enrichment pipeline.

Provides the shared engine, session factory, and declarative base
used by the SQL-backed word and session stores.
"""

from .base import Base
from .engine import (
    build_engine,
    create_schema,
    dispose_engine,
    get_db_session,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "build_engine",
    "create_schema",
    "dispose_engine",
    "get_db_session",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
