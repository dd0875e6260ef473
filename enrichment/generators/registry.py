"""Bundle the injected generation services and load them from configuration."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .. import logging_manager
from ..config_manager import get_settings
from .capabilities import (
    CharacterGuide,
    ImageGenerator,
    ImageStorage,
    MnemonicGenerator,
    SentenceGenerator,
    SpeechSynthesizer,
    Translator,
)

logger = logging_manager.get_logger().getChild("generators.registry")


@dataclass
class Capabilities:
    """Concrete generation services available to the pipeline.

    Every field is optional; stages whose service is missing record an
    error instead of running.
    """

    translator: Optional[Translator] = None
    synthesizer: Optional[SpeechSynthesizer] = None
    mnemonic_generator: Optional[MnemonicGenerator] = None
    image_generator: Optional[ImageGenerator] = None
    image_storage: Optional[ImageStorage] = None
    sentence_generator: Optional[SentenceGenerator] = None
    character_guide: Optional[CharacterGuide] = None

    @property
    def supports_images(self) -> bool:
        return self.mnemonic_generator is not None and self.image_generator is not None


def _resolve_factory(path: str) -> Callable[[], Any]:
    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ValueError(
            f"Capabilities factory {path!r} must look like 'package.module:callable'"
        )
    module = importlib.import_module(module_name)
    try:
        factory = getattr(module, attribute)
    except AttributeError as exc:
        raise ValueError(f"Module {module_name!r} has no attribute {attribute!r}") from exc
    if not callable(factory):
        raise ValueError(f"Capabilities factory {path!r} is not callable")
    return factory


def load_capabilities(path: Optional[str] = None) -> Capabilities:
    """Return the services built by the configured factory, or none at all."""

    path = path or get_settings().capabilities_factory
    if not path:
        logger.warning(
            "No capabilities factory configured; generation stages are disabled",
            extra={"event": "capabilities.missing"},
        )
        return Capabilities()
    capabilities = _resolve_factory(path)()
    if not isinstance(capabilities, Capabilities):
        raise TypeError(
            f"Capabilities factory {path!r} returned {type(capabilities).__name__}"
        )
    logger.info(
        "Loaded generation services from %s",
        path,
        extra={"event": "capabilities.loaded"},
    )
    return capabilities


__all__ = ["Capabilities", "load_capabilities"]
