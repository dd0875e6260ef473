from __future__ import annotations

import pytest

from enrichment.words.models import WordRecord, word_status_snapshot
from enrichment.words.status import (
    ProcessingStatus,
    StatusTransitionError,
    can_transition,
    derive_overall_status,
    transition,
)

P = ProcessingStatus


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ((P.COMPLETED, P.COMPLETED, P.COMPLETED), P.COMPLETED),
        ((P.COMPLETED, P.FAILED, P.PROCESSING), P.FAILED),
        ((P.COMPLETED, P.PROCESSING, P.PENDING), P.PROCESSING),
        ((P.PENDING, P.PENDING, P.PENDING), P.PENDING),
        ((P.COMPLETED, P.COMPLETED, P.PENDING), P.PENDING),
    ],
)
def test_derive_overall_status(statuses, expected) -> None:
    assert derive_overall_status(statuses) is expected


def test_transition_allows_documented_moves() -> None:
    assert transition(P.PENDING, P.PROCESSING) is P.PROCESSING
    assert transition(P.PROCESSING, P.COMPLETED) is P.COMPLETED
    assert transition(P.PROCESSING, P.FAILED) is P.FAILED
    assert transition(P.COMPLETED, P.PROCESSING) is P.PROCESSING
    assert transition(P.FAILED, P.PROCESSING) is P.PROCESSING
    assert transition(P.PENDING, P.FAILED) is P.FAILED
    assert transition(P.PROCESSING, P.PROCESSING) is P.PROCESSING


@pytest.mark.parametrize(
    "current, target",
    [
        (P.PENDING, P.COMPLETED),
        (P.COMPLETED, P.PENDING),
        (P.FAILED, P.COMPLETED),
        (P.PENDING, P.PENDING),
    ],
)
def test_transition_rejects_invalid_moves(current, target) -> None:
    assert not can_transition(current, target)
    with pytest.raises(StatusTransitionError) as excinfo:
        transition(current, target)
    assert excinfo.value.current is current
    assert excinfo.value.target is target


def test_word_status_snapshot_reports_flags() -> None:
    record = WordRecord(
        id=7,
        word="casa",
        source_language="es",
        target_language="en",
        translations=["house"],
        audio_source_file="casa_source.mp3",
        translation_status=P.COMPLETED,
        audio_status=P.COMPLETED,
        image_status=P.FAILED,
    )

    snapshot = word_status_snapshot(record)

    assert snapshot == {
        "wordId": 7,
        "word": "casa",
        "sourceLanguage": "es",
        "targetLanguage": "en",
        "translationStatus": "COMPLETED",
        "audioGenerationStatus": "COMPLETED",
        "imageGenerationStatus": "FAILED",
        "hasTranslation": True,
        "hasAudio": True,
        "hasImage": False,
        "overallStatus": "FAILED",
    }
