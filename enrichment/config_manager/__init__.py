"""High-level configuration management for the enrichment pipeline."""
from __future__ import annotations

from .constants import (
    DEFAULT_AUDIO_OUTPUT_DIR,
    DEFAULT_AUDIO_POOL_SIZE,
    DEFAULT_AUDIO_STREAM,
    DEFAULT_CONSUMER_BACKOFF_SECONDS,
    DEFAULT_CONSUMER_BATCH_SIZE,
    DEFAULT_CONSUMER_BLOCK_MS,
    DEFAULT_CONSUMER_GROUP,
    DEFAULT_CONSUMER_RECLAIM_IDLE_MS,
    DEFAULT_IMAGE_OUTPUT_DIR,
    DEFAULT_IMAGE_POOL_SIZE,
    DEFAULT_IMAGE_STREAM,
    DEFAULT_SESSION_MAX_WORKERS,
    DEFAULT_TRANSLATION_STREAM,
    DEFAULT_ZIP_OUTPUT_DIR,
    SENSITIVE_CONFIG_KEYS,
)
from .loader import configure_settings, get_settings, reset_settings
from .settings import EnrichmentSettings, EnvironmentOverrides, secret_value


def get_redis_url() -> str | None:
    """Return the configured Redis URL or ``None`` for disconnected mode."""

    return secret_value(get_settings().redis_url)


def get_database_url() -> str | None:
    """Return the configured database URL or ``None`` for in-memory stores."""

    return secret_value(get_settings().database_url)


__all__ = [
    "DEFAULT_AUDIO_OUTPUT_DIR",
    "DEFAULT_AUDIO_POOL_SIZE",
    "DEFAULT_AUDIO_STREAM",
    "DEFAULT_CONSUMER_BACKOFF_SECONDS",
    "DEFAULT_CONSUMER_BATCH_SIZE",
    "DEFAULT_CONSUMER_BLOCK_MS",
    "DEFAULT_CONSUMER_GROUP",
    "DEFAULT_CONSUMER_RECLAIM_IDLE_MS",
    "DEFAULT_IMAGE_OUTPUT_DIR",
    "DEFAULT_IMAGE_POOL_SIZE",
    "DEFAULT_IMAGE_STREAM",
    "DEFAULT_SESSION_MAX_WORKERS",
    "DEFAULT_TRANSLATION_STREAM",
    "DEFAULT_ZIP_OUTPUT_DIR",
    "SENSITIVE_CONFIG_KEYS",
    "EnrichmentSettings",
    "EnvironmentOverrides",
    "configure_settings",
    "get_database_url",
    "get_redis_url",
    "get_settings",
    "reset_settings",
    "secret_value",
]
