"""Shared constants for the configuration manager package."""
from __future__ import annotations

from pathlib import Path

DEFAULT_AUDIO_OUTPUT_DIR = Path("generated_audio")
DEFAULT_IMAGE_OUTPUT_DIR = Path("generated_images")
DEFAULT_ZIP_OUTPUT_DIR = Path("session_zips")

DEFAULT_TRANSLATION_STREAM = "word-translation"
DEFAULT_AUDIO_STREAM = "word-audio-generation"
DEFAULT_IMAGE_STREAM = "word-image-generation"
DEFAULT_CONSUMER_GROUP = "word-enrichment"

DEFAULT_AUDIO_POOL_SIZE = 5
DEFAULT_IMAGE_POOL_SIZE = 8
DEFAULT_SESSION_MAX_WORKERS = 4
DEFAULT_CONSUMER_BATCH_SIZE = 10
DEFAULT_CONSUMER_BLOCK_MS = 1000
DEFAULT_CONSUMER_BACKOFF_SECONDS = 5.0
DEFAULT_CONSUMER_RECLAIM_IDLE_MS = 60_000

SENSITIVE_CONFIG_KEYS = {"redis_url", "database_url"}

__all__ = [
    "DEFAULT_AUDIO_OUTPUT_DIR",
    "DEFAULT_IMAGE_OUTPUT_DIR",
    "DEFAULT_ZIP_OUTPUT_DIR",
    "DEFAULT_TRANSLATION_STREAM",
    "DEFAULT_AUDIO_STREAM",
    "DEFAULT_IMAGE_STREAM",
    "DEFAULT_CONSUMER_GROUP",
    "DEFAULT_AUDIO_POOL_SIZE",
    "DEFAULT_IMAGE_POOL_SIZE",
    "DEFAULT_SESSION_MAX_WORKERS",
    "DEFAULT_CONSUMER_BATCH_SIZE",
    "DEFAULT_CONSUMER_BLOCK_MS",
    "DEFAULT_CONSUMER_BACKOFF_SECONDS",
    "DEFAULT_CONSUMER_RECLAIM_IDLE_MS",
    "SENSITIVE_CONFIG_KEYS",
]
