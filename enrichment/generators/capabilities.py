"""Interfaces of the external generation services used by each stage.

Concrete API clients live outside the pipeline; anything implementing these
protocols can be injected into the stage workers and the batch orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from .voices import VoiceConfig


class ImageStyle(str, Enum):
    REALISTIC_CINEMATIC = "REALISTIC_CINEMATIC"
    ANIMATED_2D_CINEMATIC = "ANIMATED_2D_CINEMATIC"
    ANIMATED_3D_CINEMATIC = "ANIMATED_3D_CINEMATIC"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "ImageStyle":
        if value:
            normalized = value.strip().upper().replace(" ", "_")
            for style in cls:
                if style.value == normalized:
                    return style
        return cls.REALISTIC_CINEMATIC


@dataclass
class TranslationData:
    translations: List[str] = field(default_factory=list)
    transliteration: Optional[str] = None


@dataclass
class MnemonicData:
    keyword: str
    sentence: str
    image_prompt: str
    character_guide_id: Optional[int] = None


@dataclass
class SentenceData:
    source_language_sentence: Optional[str] = None
    source_language_structure: Optional[str] = None
    target_language_sentence: Optional[str] = None
    target_language_latin: Optional[str] = None
    target_language_transliteration: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_language_sentence": self.source_language_sentence,
            "source_language_structure": self.source_language_structure,
            "target_language_sentence": self.target_language_sentence,
            "target_language_latin": self.target_language_latin,
            "target_language_transliteration": self.target_language_transliteration,
        }


@dataclass
class GeneratedImage:
    """Image returned by an :class:`ImageGenerator` as raw bytes or a URL."""

    data: Optional[bytes] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class CharacterMatch:
    """A previously curated character association for a sound."""

    id: int
    name: str
    context: Optional[str] = None


class Translator(Protocol):
    def translate(
        self, word: str, source_language: str, target_language: str
    ) -> TranslationData:
        ...


class SpeechSynthesizer(Protocol):
    def synthesize(self, text: str, voice: VoiceConfig) -> bytes:
        ...


class CharacterGuide(Protocol):
    def find_match(
        self, word: str, language: str, transliteration: Optional[str]
    ) -> Optional[CharacterMatch]:
        ...


class MnemonicGenerator(Protocol):
    def generate(
        self,
        word: str,
        translation: str,
        source_language: str,
        target_language: str,
        transliteration: Optional[str],
        *,
        style: ImageStyle = ImageStyle.REALISTIC_CINEMATIC,
        character: Optional[CharacterMatch] = None,
    ) -> MnemonicData:
        ...


class ImageGenerator(Protocol):
    def generate(self, prompt: str) -> GeneratedImage:
        ...


class ImageStorage(Protocol):
    def persist(self, image: GeneratedImage, filename: str) -> str:
        """Store ``image`` durably and return its local path."""
        ...


class SentenceGenerator(Protocol):
    def generate(
        self, word: str, source_language: str, target_language: str
    ) -> Optional[SentenceData]:
        ...


__all__ = [
    "CharacterGuide",
    "CharacterMatch",
    "GeneratedImage",
    "ImageGenerator",
    "ImageStorage",
    "ImageStyle",
    "MnemonicData",
    "MnemonicGenerator",
    "SentenceData",
    "SentenceGenerator",
    "SpeechSynthesizer",
    "TranslationData",
    "Translator",
]
