"""Dependency wiring for the FastAPI application."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from ..container import PipelineContainer
from ..messaging.publisher import WordMessagePublisher
from ..sessions.manager import SessionManager
from ..words.store import WordStatusStore


@lru_cache
def get_container() -> PipelineContainer:
    """Return the process-wide :class:`PipelineContainer`."""

    return PipelineContainer.build()


def get_word_store(
    container: PipelineContainer = Depends(get_container),
) -> WordStatusStore:
    return container.word_store


def get_publisher(
    container: PipelineContainer = Depends(get_container),
) -> WordMessagePublisher:
    return container.publisher


def get_session_manager(
    container: PipelineContainer = Depends(get_container),
) -> SessionManager:
    return container.manager


__all__ = [
    "get_container",
    "get_publisher",
    "get_session_manager",
    "get_word_store",
]
