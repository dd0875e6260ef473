"""Per-stage processing status and the transition rules between states."""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable


class ProcessingStatus(str, Enum):
    """State of one enrichment stage for one word."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Stage(str, Enum):
    """Enrichment stages tracked on every word record."""

    TRANSLATION = "translation"
    AUDIO = "audio"
    IMAGE = "image"


class StatusTransitionError(ValueError):
    """Raised when a stage status change is not permitted."""

    def __init__(self, current: ProcessingStatus, target: ProcessingStatus) -> None:
        super().__init__(
            f"Cannot move stage status from {current.value} to {target.value}"
        )
        self.current = current
        self.target = target


_ALLOWED: Dict[ProcessingStatus, FrozenSet[ProcessingStatus]] = {
    # PENDING -> FAILED covers preconditions that fail before any work starts.
    ProcessingStatus.PENDING: frozenset(
        {ProcessingStatus.PROCESSING, ProcessingStatus.FAILED}
    ),
    ProcessingStatus.PROCESSING: frozenset(
        {
            ProcessingStatus.PROCESSING,
            ProcessingStatus.COMPLETED,
            ProcessingStatus.FAILED,
        }
    ),
    # Terminal states only reopen through a new enrichment attempt.
    ProcessingStatus.COMPLETED: frozenset(
        {ProcessingStatus.PROCESSING, ProcessingStatus.FAILED}
    ),
    ProcessingStatus.FAILED: frozenset(
        {ProcessingStatus.PROCESSING, ProcessingStatus.FAILED}
    ),
}


def can_transition(current: ProcessingStatus, target: ProcessingStatus) -> bool:
    """Return ``True`` when ``current`` may move to ``target``."""

    return target in _ALLOWED[ProcessingStatus(current)]


def transition(current: ProcessingStatus, target: ProcessingStatus) -> ProcessingStatus:
    """Validate a move from ``current`` to ``target`` and return ``target``."""

    current = ProcessingStatus(current)
    target = ProcessingStatus(target)
    if not can_transition(current, target):
        raise StatusTransitionError(current, target)
    return target


def derive_overall_status(statuses: Iterable[ProcessingStatus]) -> ProcessingStatus:
    """Collapse per-stage statuses into a single word status.

    FAILED is checked before PROCESSING, so a word with one failed stage and
    another still running reports FAILED and may later flip to COMPLETED
    once a new attempt succeeds.
    """

    values = [ProcessingStatus(status) for status in statuses]
    if values and all(status == ProcessingStatus.COMPLETED for status in values):
        return ProcessingStatus.COMPLETED
    if any(status == ProcessingStatus.FAILED for status in values):
        return ProcessingStatus.FAILED
    if any(status == ProcessingStatus.PROCESSING for status in values):
        return ProcessingStatus.PROCESSING
    return ProcessingStatus.PENDING


__all__ = [
    "ProcessingStatus",
    "Stage",
    "StatusTransitionError",
    "can_transition",
    "derive_overall_status",
    "transition",
]
