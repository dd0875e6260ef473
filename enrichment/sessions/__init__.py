"""Batch sessions: models, stores, orchestration and bundling."""

from .bundler import AssetBundler
from .lifecycle import (
    apply_cancel_transition,
    apply_completion,
    apply_failure,
    apply_retry_transition,
    apply_start_transition,
    is_current_run,
)
from .manager import SessionManager
from .models import (
    BatchRequest,
    DedupStats,
    ProcessSummary,
    SessionPayload,
    SessionRecord,
    SessionStatus,
    SessionTransitionError,
    WordResult,
)
from .orchestrator import BatchOrchestrator
from .reuse import DedupResolver
from .sql_store import SqlSessionStore
from .store import InMemorySessionStore, SessionStore

__all__ = [
    "AssetBundler",
    "BatchOrchestrator",
    "BatchRequest",
    "DedupResolver",
    "DedupStats",
    "InMemorySessionStore",
    "ProcessSummary",
    "SessionManager",
    "SessionPayload",
    "SessionRecord",
    "SessionStatus",
    "SessionStore",
    "SessionTransitionError",
    "SqlSessionStore",
    "WordResult",
    "apply_cancel_transition",
    "apply_completion",
    "apply_failure",
    "apply_retry_transition",
    "apply_start_transition",
    "is_current_run",
]
