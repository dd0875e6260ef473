"""Per-language text-to-speech voice selection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .. import logging_manager

logger = logging_manager.get_logger().getChild("generators.voices")


class VoiceGender(str, Enum):
    NEUTRAL = "NEUTRAL"
    MALE = "MALE"
    FEMALE = "FEMALE"


@dataclass(frozen=True)
class VoiceConfig:
    """Voice used to synthesize speech for one language."""

    language_code: str
    gender: VoiceGender = VoiceGender.NEUTRAL
    voice_name: Optional[str] = None

    def cache_key(self) -> Tuple[str, str, Optional[str]]:
        return (self.language_code, self.gender.value, self.voice_name)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "language_code": self.language_code,
            "gender": self.gender.value,
            "voice_name": self.voice_name,
        }


DEFAULT_LANGUAGE = "en"

_VOICES: Dict[str, VoiceConfig] = {
    "en": VoiceConfig("en-US", VoiceGender.NEUTRAL, "en-US-Neural2-A"),
    "es": VoiceConfig("es-US", VoiceGender.NEUTRAL, "es-US-Neural2-B"),
    "fr": VoiceConfig("fr-FR", VoiceGender.NEUTRAL, "fr-FR-Neural2-B"),
    "ko": VoiceConfig("ko-KR", VoiceGender.NEUTRAL, "ko-KR-Standard-A"),
    "ja": VoiceConfig("ja-JP", VoiceGender.NEUTRAL, "ja-JP-Neural2-C"),
    "hi": VoiceConfig("hi-IN", VoiceGender.NEUTRAL, "hi-IN-Neural2-A"),
    "pa": VoiceConfig("pa-IN", VoiceGender.NEUTRAL, "pa-IN-Standard-A"),
    "tl": VoiceConfig("tl-PH", VoiceGender.NEUTRAL, "tl-PH-Standard-A"),
}


def supported_languages() -> Tuple[str, ...]:
    return tuple(sorted(_VOICES))


def resolve_voice(language: str) -> VoiceConfig:
    """Return the voice for ``language``, falling back to English."""

    key = (language or "").strip().lower()
    voice = _VOICES.get(key)
    if voice is None:
        logger.warning(
            "Unknown language code %r; defaulting to English voice",
            language,
            extra={"event": "voice.fallback"},
        )
        return _VOICES[DEFAULT_LANGUAGE]
    return voice


__all__ = [
    "DEFAULT_LANGUAGE",
    "VoiceConfig",
    "VoiceGender",
    "resolve_voice",
    "supported_languages",
]
