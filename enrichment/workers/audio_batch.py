"""Run text-to-speech requests as one batch on the audio pool."""

from __future__ import annotations

import time
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .. import logging_manager
from ..config_manager import get_settings
from ..generators.capabilities import SpeechSynthesizer
from ..generators.voices import VoiceConfig
from .pool import WorkerPool

logger = logging_manager.get_logger().getChild("workers.audio_batch")


def _with_extension(file_name: str) -> str:
    return file_name if file_name.endswith(".mp3") else f"{file_name}.mp3"


@dataclass(frozen=True)
class AudioRequest:
    text: str
    voice: VoiceConfig
    file_name: str

    @property
    def output_name(self) -> str:
        return _with_extension(self.file_name)

    def dedup_key(self) -> tuple:
        return (self.text, self.voice.cache_key())


@dataclass(frozen=True)
class AudioResult:
    """Outcome of one :class:`AudioRequest`; ``local_file_path`` is ``None`` on failure."""

    local_file_path: Optional[str]
    file_name: str
    text: str
    language_code: str
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.local_file_path is not None


class AudioBatchGenerator:
    """Synthesize many clips concurrently and write them to the audio directory."""

    def __init__(
        self,
        synthesizer: Optional[SpeechSynthesizer],
        pool: WorkerPool,
        *,
        output_dir: Optional[Path] = None,
    ) -> None:
        self._synthesizer = synthesizer
        self._pool = pool
        self._output_dir = Path(output_dir or get_settings().audio_output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def submit(self, requests: Sequence[AudioRequest]) -> List[Future]:
        """Queue every request on the audio pool and return their futures."""

        return [self._pool.submit(self._generate_one, request) for request in requests]

    def generate(self, requests: Sequence[AudioRequest]) -> List[AudioResult]:
        """Generate ``requests`` and wait for all of them."""

        if not requests:
            return []
        started = time.perf_counter()
        results: List[AudioResult] = self._pool.gather(self.submit(requests))
        failures = sum(1 for result in results if not result.succeeded)
        logger.info(
            "Generated %s audio files (%s failed)",
            len(results) - failures,
            failures,
            extra={
                "event": "audio.batch.completed",
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
            },
        )
        return results

    def _generate_one(self, request: AudioRequest) -> AudioResult:
        try:
            if self._synthesizer is None:
                raise RuntimeError("Speech synthesizer is not configured")
            audio = self._synthesizer.synthesize(request.text, request.voice)
            self._output_dir.mkdir(parents=True, exist_ok=True)
            path = self._output_dir.resolve() / request.output_name
            path.write_bytes(audio)
        except Exception as exc:
            logger.error(
                "Audio generation failed for %r: %s",
                request.text,
                exc,
                extra={"event": "audio.request.failed"},
            )
            return AudioResult(
                local_file_path=None,
                file_name=request.output_name,
                text=request.text,
                language_code=request.voice.language_code,
                error=str(exc),
            )
        return AudioResult(
            local_file_path=str(path),
            file_name=request.output_name,
            text=request.text,
            language_code=request.voice.language_code,
        )


__all__ = ["AudioBatchGenerator", "AudioRequest", "AudioResult"]
