"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from enrichment import logging_manager

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
)

logger = logging_manager.get_logger()


class EnrichmentSettings(BaseModel):
    """Typed representation of the pipeline configuration."""

    model_config = ConfigDict(extra="allow")

    audio_output_dir: str = str(DEFAULT_AUDIO_OUTPUT_DIR)
    image_output_dir: str = str(DEFAULT_IMAGE_OUTPUT_DIR)
    zip_output_dir: str = str(DEFAULT_ZIP_OUTPUT_DIR)
    redis_url: Optional[SecretStr] = None
    consumer_group: str = DEFAULT_CONSUMER_GROUP
    translation_stream: str = DEFAULT_TRANSLATION_STREAM
    audio_stream: str = DEFAULT_AUDIO_STREAM
    image_stream: str = DEFAULT_IMAGE_STREAM
    audio_pool_size: int = DEFAULT_AUDIO_POOL_SIZE
    image_pool_size: int = DEFAULT_IMAGE_POOL_SIZE
    session_max_workers: int = DEFAULT_SESSION_MAX_WORKERS
    consumer_batch_size: int = DEFAULT_CONSUMER_BATCH_SIZE
    consumer_block_ms: int = DEFAULT_CONSUMER_BLOCK_MS
    consumer_backoff_seconds: float = DEFAULT_CONSUMER_BACKOFF_SECONDS
    consumer_reclaim_idle_ms: int = DEFAULT_CONSUMER_RECLAIM_IDLE_MS
    database_url: Optional[SecretStr] = None
    capabilities_factory: Optional[str] = None
    debug: bool = False


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix="", env_nested_delimiter="__", extra="ignore")

    audio_output_dir: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("AUDIO_OUTPUT_DIRECTORY", "ENRICHMENT_AUDIO_OUTPUT_DIR"),
    )
    image_output_dir: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("IMAGE_OUTPUT_DIRECTORY", "ENRICHMENT_IMAGE_OUTPUT_DIR"),
    )
    zip_output_dir: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ZIP_OUTPUT_DIRECTORY", "ENRICHMENT_ZIP_OUTPUT_DIR"),
    )
    redis_url: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("REDIS_URL", "ENRICHMENT_REDIS_URL")
    )
    consumer_group: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REDIS_CONSUMER_GROUP", "ENRICHMENT_CONSUMER_GROUP"),
    )
    translation_stream: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_TRANSLATION_STREAM")
    )
    audio_stream: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_AUDIO_STREAM")
    )
    image_stream: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_IMAGE_STREAM")
    )
    audio_pool_size: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_AUDIO_POOL_SIZE")
    )
    image_pool_size: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_IMAGE_POOL_SIZE")
    )
    session_max_workers: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_SESSION_MAX_WORKERS")
    )
    consumer_backoff_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_CONSUMER_BACKOFF_SECONDS")
    )
    consumer_reclaim_idle_ms: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_CONSUMER_RECLAIM_IDLE_MS")
    )
    database_url: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL", "ENRICHMENT_DATABASE_URL")
    )
    capabilities_factory: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_CAPABILITIES")
    )
    debug: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("ENRICHMENT_DEBUG")
    )


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={"event": "config.env.validation_error", "error": str(exc)},
        )
        return {}
    return overrides.model_dump(exclude_none=True)


def apply_settings_updates(
    settings: EnrichmentSettings, updates: Dict[str, Any]
) -> EnrichmentSettings:
    """Return a copy of ``settings`` updated with ``updates`` if any values exist."""

    if not updates:
        return settings
    return settings.model_copy(update=updates)


def secret_value(value: Optional[SecretStr | str]) -> Optional[str]:
    """Return the plain string behind ``value`` or ``None`` when blank."""

    if value is None:
        return None
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    raw = value.strip()
    return raw or None


__all__ = [
    "EnrichmentSettings",
    "EnvironmentOverrides",
    "apply_settings_updates",
    "load_environment_overrides",
    "secret_value",
]
