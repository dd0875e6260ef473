"""Load and cache the active :class:`EnrichmentSettings`."""
from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from .settings import EnrichmentSettings, apply_settings_updates, load_environment_overrides

_ACTIVE_SETTINGS: Optional[EnrichmentSettings] = None
_SETTINGS_LOCK = threading.Lock()


def get_settings() -> EnrichmentSettings:
    """Return the currently loaded :class:`EnrichmentSettings` instance."""

    global _ACTIVE_SETTINGS
    with _SETTINGS_LOCK:
        if _ACTIVE_SETTINGS is None:
            settings = EnrichmentSettings()
            env_overrides = load_environment_overrides()
            _ACTIVE_SETTINGS = apply_settings_updates(settings, env_overrides)
        return _ACTIVE_SETTINGS


def configure_settings(**updates: Any) -> EnrichmentSettings:
    """Overlay ``updates`` on the active settings and return the result."""

    global _ACTIVE_SETTINGS
    current = get_settings()
    payload: Dict[str, Any] = {key: value for key, value in updates.items() if value is not None}
    with _SETTINGS_LOCK:
        _ACTIVE_SETTINGS = apply_settings_updates(current, payload)
        return _ACTIVE_SETTINGS


def reset_settings() -> None:
    """Drop the cached settings so the next access reloads them."""

    global _ACTIVE_SETTINGS
    with _SETTINGS_LOCK:
        _ACTIVE_SETTINGS = None


__all__ = ["get_settings", "configure_settings", "reset_settings"]
