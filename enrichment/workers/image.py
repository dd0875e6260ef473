"""Image stage: mnemonic, prompt, image generation and storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .. import logging_manager
from ..filenames import unique_filename
from ..generators.capabilities import (
    CharacterGuide,
    ImageGenerator,
    ImageStorage,
    ImageStyle,
    MnemonicGenerator,
)
from ..words.models import VariantKind, WordRecord
from ..words.status import Stage
from ..words.store import WordStatusStore
from .base import StageWorker
from .pool import WorkerPool

logger = logging_manager.get_logger().getChild("workers.image")


@dataclass(frozen=True)
class RenderedImage:
    """Everything written to a word record by one image generation."""

    image_file: str
    image_local_path: str
    image_prompt: str
    mnemonic_keyword: str
    mnemonic_sentence: str
    character_guide_id: Optional[int] = None


class ImageWorker(StageWorker):
    stage = Stage.IMAGE

    def __init__(
        self,
        store: WordStatusStore,
        mnemonic_generator: Optional[MnemonicGenerator],
        image_generator: Optional[ImageGenerator],
        image_storage: ImageStorage,
        pool: WorkerPool,
        *,
        character_guide: Optional[CharacterGuide] = None,
        style: ImageStyle = ImageStyle.REALISTIC_CINEMATIC,
    ) -> None:
        super().__init__(store)
        self._mnemonics = mnemonic_generator
        self._images = image_generator
        self._storage = image_storage
        self._pool = pool
        self._character_guide = character_guide
        self._style = style

    def precondition_failure(self, record: WordRecord) -> Optional[str]:
        if not record.has_translation:
            return "no translation available"
        return None

    def process(self, record: WordRecord) -> None:
        self.render(record)

    def render(self, record: WordRecord, *, style: Optional[ImageStyle] = None) -> RenderedImage:
        """Generate and store a mnemonic image for ``record``.

        Writes the mnemonic and image fields plus their variants; stage
        status is left to the caller.
        """

        if self._mnemonics is None or self._images is None:
            raise RuntimeError("Image generation is not configured")
        style = style or self._style
        translation = record.primary_translation or ""
        character = None
        if self._character_guide is not None:
            character = self._character_guide.find_match(
                record.word, record.source_language, record.transliteration
            )
            if character is not None:
                logger.debug(
                    "Reusing character %s for word %s",
                    character.name,
                    record.id,
                    extra={"event": "stage.image.character_matched"},
                )
        mnemonic = self._pool.run(
            self._mnemonics.generate,
            record.word,
            translation,
            record.source_language,
            record.target_language,
            record.transliteration,
            style=style,
            character=character,
        )
        character_id = mnemonic.character_guide_id
        if character_id is None and character is not None:
            character_id = character.id
        self._store.update_mnemonic(
            record.id,
            mnemonic.keyword,
            mnemonic.sentence,
            character_guide_id=character_id,
        )
        self._store.add_variant(
            record.id,
            VariantKind.MNEMONIC,
            {
                "keyword": mnemonic.keyword,
                "sentence": mnemonic.sentence,
                "character_guide_id": character_id,
            },
        )

        image = self._pool.run(self._images.generate, mnemonic.image_prompt)
        filename = unique_filename(mnemonic.sentence or record.word, "jpg")
        local_path = self._pool.run(self._storage.persist, image, filename)
        self._store.update_image(record.id, filename, mnemonic.image_prompt)
        self._store.add_variant(
            record.id,
            VariantKind.IMAGE,
            {
                "image_file": filename,
                "image_local_path": local_path,
                "image_prompt": mnemonic.image_prompt,
                "image_style": style.value,
            },
        )
        return RenderedImage(
            image_file=filename,
            image_local_path=local_path,
            image_prompt=mnemonic.image_prompt,
            mnemonic_keyword=mnemonic.keyword,
            mnemonic_sentence=mnemonic.sentence,
            character_guide_id=character_id,
        )


__all__ = ["ImageWorker", "RenderedImage"]
