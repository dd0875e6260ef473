"""Capability interfaces for the external generation services."""

from .capabilities import (
    CharacterGuide,
    CharacterMatch,
    GeneratedImage,
    ImageGenerator,
    ImageStorage,
    ImageStyle,
    MnemonicData,
    MnemonicGenerator,
    SentenceData,
    SentenceGenerator,
    SpeechSynthesizer,
    TranslationData,
    Translator,
)
from .registry import Capabilities, load_capabilities
from .storage import LocalImageStorage
from .voices import VoiceConfig, VoiceGender, resolve_voice

__all__ = [
    "Capabilities",
    "CharacterGuide",
    "CharacterMatch",
    "GeneratedImage",
    "ImageGenerator",
    "ImageStorage",
    "ImageStyle",
    "LocalImageStorage",
    "MnemonicData",
    "MnemonicGenerator",
    "SentenceData",
    "SentenceGenerator",
    "SpeechSynthesizer",
    "TranslationData",
    "Translator",
    "VoiceConfig",
    "VoiceGender",
    "load_capabilities",
    "resolve_voice",
]
