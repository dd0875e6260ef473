"""Routes for word status queries and word registration."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...messaging.message import StreamMessage
from ...messaging.publisher import WordMessagePublisher
from ...words.store import WordStatusStore
from ..dependencies import get_publisher, get_word_store
from ..schemas import (
    WordCreateRequest,
    WordCreateResponse,
    WordStatusListResponse,
    WordStatusResponse,
)

router = APIRouter()


def _parse_ids(raw: str) -> List[int]:
    ids: List[int] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            ids.append(int(chunk))
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid word id: {chunk!r}",
            ) from exc
    return ids


@router.get("/status", response_model=WordStatusListResponse)
def get_words_status(
    word_ids: str = Query(..., alias="wordIds"),
    store: WordStatusStore = Depends(get_word_store),
):
    """Return the status of every requested word; unknown ids are listed as missing."""

    response = WordStatusListResponse()
    for word_id in _parse_ids(word_ids):
        try:
            record = store.get(word_id)
        except KeyError:
            response.missing.append(word_id)
            continue
        response.words.append(WordStatusResponse.from_record(record))
    return response


@router.get("/{word_id}/status", response_model=WordStatusResponse)
def get_word_status(
    word_id: int,
    store: WordStatusStore = Depends(get_word_store),
):
    try:
        record = store.get(word_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Word not found") from exc
    return WordStatusResponse.from_record(record)


@router.post("", response_model=WordCreateResponse, status_code=status.HTTP_202_ACCEPTED)
def create_word(
    payload: WordCreateRequest,
    store: WordStatusStore = Depends(get_word_store),
    publisher: WordMessagePublisher = Depends(get_publisher),
):
    """Register ``payload`` and queue it on the translation topic."""

    record = store.get_or_create(payload.word, payload.source_language, payload.target_language)
    message_id = publisher.publish_translation(StreamMessage.for_record(record))
    return WordCreateResponse(
        word=WordStatusResponse.from_record(record),
        messageId=message_id,
    )


__all__ = ["router"]
