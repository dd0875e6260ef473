"""Stage workers, worker pools and the consumer runner."""

from .audio import AudioWorker
from .audio_batch import AudioBatchGenerator, AudioRequest, AudioResult
from .base import StageWorker
from .image import ImageWorker, RenderedImage
from .pool import WorkerPool
from .runner import PipelineRunner
from .translation import TranslationWorker

__all__ = [
    "AudioBatchGenerator",
    "AudioRequest",
    "AudioResult",
    "AudioWorker",
    "ImageWorker",
    "PipelineRunner",
    "RenderedImage",
    "StageWorker",
    "TranslationWorker",
    "WorkerPool",
]
