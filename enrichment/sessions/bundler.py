"""Package a session's generated audio and images into a ZIP archive."""

from __future__ import annotations

import os
import tempfile
import time
import zipfile
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .. import logging_manager
from ..config_manager import get_settings
from ..filenames import sanitize_filename
from .models import SessionPayload, SessionRecord

logger = logging_manager.get_logger().getChild("sessions.bundler")

USAGE_INSTRUCTIONS = (
    "Usage Instructions",
    "==================",
    "This ZIP contains all generated assets (audio + images) for your translations.",
    "Import the audio and image files into Anki along with your flashcards.",
    "",
    "Available Anki Placeholders:",
    "  [source-audio] - Audio file for source word",
    "  [target-audio] - Audio file for translation",
    "  [sentence-source-audio] - Audio file for sentence",
    "  [image] - Generated mnemonic image",
    "  [mnemonic_keyword] - Keyword used in mnemonic",
    "  [mnemonic_sentence] - Full mnemonic sentence",
)


class AssetBundler:
    """Collect session assets from disk and write them into one archive."""

    def __init__(
        self,
        *,
        audio_dir: Optional[Path] = None,
        image_dir: Optional[Path] = None,
        zip_dir: Optional[Path] = None,
    ) -> None:
        settings = get_settings()
        self._audio_dir = Path(audio_dir or settings.audio_output_dir)
        self._image_dir = Path(image_dir or settings.image_output_dir)
        self._zip_dir = Path(zip_dir or settings.zip_output_dir)

    @property
    def zip_dir(self) -> Path:
        return self._zip_dir

    def create_session_zip(self, session: SessionRecord, payload: SessionPayload) -> Path:
        """Write the archive for ``session`` and return its path."""

        self._zip_dir.mkdir(parents=True, exist_ok=True)
        stem = sanitize_filename(session.word, default="session")
        zip_path = self._zip_dir / (
            f"session_{session.id}_{stem}_{int(time.time() * 1000)}.zip"
        )
        files = self.collect_files(payload)

        manifest_handle = tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", suffix=".txt", delete=False
        )
        try:
            with manifest_handle:
                manifest_handle.write(self.render_manifest(session, payload))
            with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                names = set()
                for path in files:
                    arcname = path.name
                    if arcname in names:
                        logger.debug(
                            "Skipping duplicate archive entry %s",
                            arcname,
                            extra={"event": "bundle.duplicate_entry"},
                        )
                        continue
                    names.add(arcname)
                    archive.write(path, arcname=arcname)
                archive.write(
                    manifest_handle.name,
                    arcname=f"session_{session.id}_metadata.txt",
                )
        finally:
            try:
                os.unlink(manifest_handle.name)
            except OSError:
                logger.debug(
                    "Unable to remove manifest %s",
                    manifest_handle.name,
                    extra={"event": "bundle.manifest_cleanup_failed"},
                )

        logger.info(
            "Created archive %s with %s files",
            zip_path,
            len(files),
            extra={"event": "bundle.created", "session_id": session.id},
        )
        return zip_path

    def collect_files(self, payload: SessionPayload) -> List[Path]:
        """Return existing asset files referenced by ``payload`` without duplicates."""

        seen = set()
        files: List[Path] = []
        for value, base_dir in self._iter_references(payload):
            path = self._resolve(value, base_dir)
            key = str(path)
            if key in seen:
                continue
            seen.add(key)
            if not path.is_file():
                logger.warning(
                    "Asset %s not found; skipping",
                    path,
                    extra={"event": "bundle.missing_file"},
                )
                continue
            files.append(path)
        return files

    def _iter_references(self, payload: SessionPayload) -> Iterator[Tuple[str, Path]]:
        for audio in payload.audio_files:
            yield audio, self._audio_dir
        for word in payload.words:
            if word.source_audio_file:
                yield word.source_audio_file, self._audio_dir
            for audio in word.target_audio_files:
                yield audio, self._audio_dir
            if word.sentence_audio_file:
                yield word.sentence_audio_file, self._audio_dir
            if word.image_local_path:
                yield word.image_local_path, self._image_dir
            elif word.image_file:
                yield word.image_file, self._image_dir

    @staticmethod
    def _resolve(value: str, base_dir: Path) -> Path:
        candidate = Path(value)
        if candidate.is_absolute():
            return candidate
        if candidate.name == value:
            return Path(os.path.abspath(base_dir / candidate))
        return Path(os.path.abspath(candidate))

    @staticmethod
    def render_manifest(session: SessionRecord, payload: SessionPayload) -> str:
        lines = [
            "Translation Session Metadata",
            "============================",
            "",
            f"Session ID: {session.id}",
            f"Word/Phrase: {session.word}",
            f"Source Language: {session.source_language}",
            f"Target Language: {session.target_language}",
            f"Status: {session.status.value}",
            f"Created: {session.created_at.isoformat() if session.created_at else ''}",
        ]
        if session.completed_at is not None:
            lines.append(f"Completed: {session.completed_at.isoformat()}")
        lines.append("")
        if payload.total_words is not None:
            lines.append(f"Total Words Processed: {payload.total_words}")
        lines.append(f"Audio Files: {len(payload.audio_files)}")
        lines.append("")
        if payload.words:
            lines.extend(["Word Details", "============", ""])
            for index, word in enumerate(payload.words, start=1):
                lines.append(f"{index}. {word.source_word}")
                lines.append(f"   Translations: {', '.join(word.translations)}")
                if word.mnemonic_keyword:
                    lines.append(f"   Mnemonic Keyword: {word.mnemonic_keyword}")
                if word.mnemonic_sentence:
                    lines.append(f"   Mnemonic: {word.mnemonic_sentence}")
                if word.source_audio_file:
                    lines.append(f"   Source Audio: {word.source_audio_file}")
                if word.target_audio_files:
                    lines.append(f"   Target Audio: {', '.join(word.target_audio_files)}")
                if word.image_file:
                    lines.append(f"   Image: {word.image_file}")
                lines.append("")
        lines.append("")
        lines.extend(USAGE_INSTRUCTIONS)
        return "\n".join(lines) + "\n"


__all__ = ["AssetBundler"]
