"""Word records, per-stage statuses and their storage backends."""

from .models import VariantKind, WordRecord, WordVariant, word_status_snapshot
from .status import (
    ProcessingStatus,
    Stage,
    StatusTransitionError,
    can_transition,
    derive_overall_status,
    transition,
)
from .store import InMemoryWordStore, WordStatusStore, record_stage_status

__all__ = [
    "InMemoryWordStore",
    "ProcessingStatus",
    "Stage",
    "StatusTransitionError",
    "VariantKind",
    "WordRecord",
    "WordStatusStore",
    "WordVariant",
    "can_transition",
    "derive_overall_status",
    "record_stage_status",
    "transition",
    "word_status_snapshot",
]
