from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set

import pytest

from enrichment.config_manager import configure_settings, reset_settings
from enrichment.generators.capabilities import (
    CharacterMatch,
    GeneratedImage,
    ImageStyle,
    MnemonicData,
    SentenceData,
    TranslationData,
)
from enrichment.generators.registry import Capabilities
from enrichment.generators.storage import LocalImageStorage
from enrichment.generators.voices import VoiceConfig
from enrichment.sessions.store import InMemorySessionStore
from enrichment.workers.pool import WorkerPool
from enrichment.words.store import InMemoryWordStore

_ENV_KEYS = (
    "REDIS_URL",
    "ENRICHMENT_REDIS_URL",
    "DATABASE_URL",
    "ENRICHMENT_DATABASE_URL",
    "ENRICHMENT_CAPABILITIES",
)


class FakeTranslator:
    def __init__(self, translations: Optional[Dict[str, List[str]]] = None) -> None:
        self.translations = translations or {}
        self.calls: List[tuple] = []
        self.failures: Set[str] = set()

    def translate(self, word: str, source_language: str, target_language: str) -> TranslationData:
        self.calls.append((word, source_language, target_language))
        if word in self.failures:
            raise RuntimeError(f"translation service rejected {word}")
        return TranslationData(
            translations=list(self.translations.get(word, [f"{word}-{target_language}"])),
            transliteration=None,
        )


class FakeSynthesizer:
    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.failures: Set[str] = set()

    def synthesize(self, text: str, voice: VoiceConfig) -> bytes:
        self.calls.append((text, voice.language_code))
        if text in self.failures:
            raise RuntimeError(f"tts failed for {text}")
        return f"audio:{text}".encode("utf-8")


class FakeMnemonicGenerator:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

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
        self.calls.append((word, translation, style, character))
        return MnemonicData(
            keyword=f"{word}-key",
            sentence=f"A {word} that means {translation}",
            image_prompt=f"Picture of {translation}",
        )


class FakeImageGenerator:
    def __init__(self) -> None:
        self.prompts: List[str] = []
        self.fail = False

    def generate(self, prompt: str) -> GeneratedImage:
        self.prompts.append(prompt)
        if self.fail:
            raise RuntimeError("image service unavailable")
        return GeneratedImage(data=b"jpeg-bytes")


class FakeSentenceGenerator:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def generate(self, word: str, source_language: str, target_language: str) -> SentenceData:
        self.calls.append((word, source_language, target_language))
        return SentenceData(
            source_language_sentence=f"Mi {word} es grande",
            target_language_sentence=f"My {word} is big",
        )


class FakeCharacterGuide:
    def __init__(self, match: Optional[CharacterMatch] = None) -> None:
        self.match = match
        self.calls: List[tuple] = []

    def find_match(
        self, word: str, language: str, transliteration: Optional[str]
    ) -> Optional[CharacterMatch]:
        self.calls.append((word, language, transliteration))
        return self.match


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Dict[str, Path]]:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    dirs = {
        "audio": tmp_path / "audio",
        "image": tmp_path / "images",
        "zip": tmp_path / "zips",
    }
    configure_settings(
        audio_output_dir=str(dirs["audio"]),
        image_output_dir=str(dirs["image"]),
        zip_output_dir=str(dirs["zip"]),
        consumer_backoff_seconds=0.01,
        consumer_block_ms=10,
    )
    yield dirs
    reset_settings()


@pytest.fixture
def output_dirs(_isolated_settings: Dict[str, Path]) -> Dict[str, Path]:
    return _isolated_settings


@pytest.fixture
def word_store() -> InMemoryWordStore:
    return InMemoryWordStore()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def audio_pool() -> Iterator[WorkerPool]:
    pool = WorkerPool("audio-test", max_workers=2)
    yield pool
    pool.shutdown()


@pytest.fixture
def image_pool() -> Iterator[WorkerPool]:
    pool = WorkerPool("image-test", max_workers=2)
    yield pool
    pool.shutdown()


@pytest.fixture
def translator() -> FakeTranslator:
    return FakeTranslator({"casa": ["house", "home"], "perro": ["dog"]})


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def mnemonic_generator() -> FakeMnemonicGenerator:
    return FakeMnemonicGenerator()


@pytest.fixture
def image_generator() -> FakeImageGenerator:
    return FakeImageGenerator()


@pytest.fixture
def sentence_generator() -> FakeSentenceGenerator:
    return FakeSentenceGenerator()


@pytest.fixture
def character_guide() -> FakeCharacterGuide:
    return FakeCharacterGuide()


@pytest.fixture
def capabilities(
    translator: FakeTranslator,
    synthesizer: FakeSynthesizer,
    mnemonic_generator: FakeMnemonicGenerator,
    image_generator: FakeImageGenerator,
    sentence_generator: FakeSentenceGenerator,
    character_guide: FakeCharacterGuide,
    output_dirs: Dict[str, Path],
) -> Capabilities:
    return Capabilities(
        translator=translator,
        synthesizer=synthesizer,
        mnemonic_generator=mnemonic_generator,
        image_generator=image_generator,
        image_storage=LocalImageStorage(output_dirs["image"]),
        sentence_generator=sentence_generator,
        character_guide=character_guide,
    )
