"""Run one batch of words through translation, audio, sentences and images."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .. import logging_manager
from ..filenames import audio_file_stem
from ..generators.capabilities import SentenceGenerator, Translator
from ..logging_manager import log_context
from ..words.models import VariantKind, WordRecord, normalize_translations
from ..words.status import ProcessingStatus, Stage
from ..words.store import WordStatusStore, record_stage_status
from ..workers.audio_batch import AudioBatchGenerator, AudioRequest, AudioResult
from ..workers.image import ImageWorker
from .bundler import AssetBundler
from .lifecycle import (
    apply_completion,
    apply_failure,
    apply_start_transition,
    is_current_run,
)
from .models import (
    BatchRequest,
    DedupStats,
    ProcessSummary,
    SessionRecord,
    SessionStatus,
    WordResult,
    utcnow_iso,
)
from .reuse import TRANSLATION_SUCCESS, DedupResolver
from .store import SessionStore

logger = logging_manager.get_logger().getChild("sessions.orchestrator")

FAILED = "failed"
REUSED = "reused"


@dataclass
class _AudioPlan:
    """Audio requests of a batch, deduplicated by text and voice."""

    requests: Dict[tuple, AudioRequest] = field(default_factory=dict)
    owners: Dict[int, List[Tuple[str, tuple]]] = field(default_factory=dict)

    def add(self, word_id: int, role: str, request: AudioRequest) -> str:
        key = request.dedup_key()
        existing = self.requests.setdefault(key, request)
        self.owners.setdefault(word_id, []).append((role, key))
        return existing.output_name

    def __len__(self) -> int:
        return len(self.requests)


class BatchOrchestrator:
    """Process a session's words sequentially and finalize its payload."""

    def __init__(
        self,
        word_store: WordStatusStore,
        session_store: SessionStore,
        resolver: DedupResolver,
        audio_generator: AudioBatchGenerator,
        bundler: AssetBundler,
        translator: Optional[Translator] = None,
        *,
        image_worker: Optional[ImageWorker] = None,
        sentence_generator: Optional[SentenceGenerator] = None,
    ) -> None:
        self._words = word_store
        self._sessions = session_store
        self._resolver = resolver
        self._audio = audio_generator
        self._bundler = bundler
        self._translator = translator
        self._image_worker = image_worker
        self._sentences = sentence_generator

    def process(
        self, session_id: int, request: BatchRequest, attempt: Optional[int] = None
    ) -> SessionRecord:
        """Run ``request`` for ``session_id`` and return the final session state.

        ``attempt`` is the session's retry count when the run was scheduled;
        once a cancel or retry supersedes it, the run stops writing.
        """

        with log_context(session_id=session_id):
            if attempt is None:
                attempt = self._sessions.get(session_id).retry_count
            try:
                return self._process(session_id, request, attempt)
            except Exception as exc:
                logger.error(
                    "Session %s failed: %s",
                    session_id,
                    exc,
                    exc_info=True,
                    extra={"event": "session.failed"},
                )
                error = str(exc)

                def fail(record: SessionRecord) -> None:
                    if (
                        is_current_run(record, attempt)
                        and record.status is SessionStatus.IN_PROGRESS
                    ):
                        apply_failure(record, error)

                return self._sessions.mutate(session_id, fail)

    def _process(self, session_id: int, request: BatchRequest, attempt: int) -> SessionRecord:
        session = self._sessions.get(session_id)
        if not is_current_run(session, attempt):
            logger.info(
                "Session %s attempt %s was cancelled or superseded before it started",
                session_id,
                attempt,
                extra={"event": "session.skipped"},
            )
            return session

        session = self._sessions.mutate(session_id, apply_start_transition)
        started = time.perf_counter()
        logger.info(
            "Processing %s words for session %s",
            len(request.source_words),
            session_id,
            extra={"event": "session.started"},
        )

        summary = ProcessSummary()
        plan = _AudioPlan()
        results: List[WordResult] = []
        for index, word in enumerate(request.source_words):
            if not self._is_current(session_id, attempt):
                return self._stop_cancelled(session_id)
            with log_context(word=word):
                result: Optional[WordResult] = None
                if not request.override_translation:
                    result = self._resolver.resolve(
                        word, request.source_language, request.target_language
                    )
                if result is None:
                    result = self._process_word(word, request, summary, plan)
                else:
                    logger.info(
                        "Reusing existing data for %r",
                        word,
                        extra={"event": "session.word_reused"},
                    )
            results.append(result)
            self._record_progress(session_id, attempt, results, index + 1)

        audio_files = self._run_audio(plan, summary)
        if not self._is_current(session_id, attempt):
            return self._stop_cancelled(session_id)

        summary.refresh()
        dedup = DedupStats.from_results(results)
        applied: List[str] = []

        def finalize(record: SessionRecord) -> None:
            if not is_current_run(record, attempt):
                return
            payload = record.payload
            payload.words = results
            payload.total_words = len(request.source_words)
            payload.processed_words = len(request.source_words)
            payload.processing = False
            payload.audio_files = audio_files
            payload.source_language = request.source_language
            payload.target_language = request.target_language
            payload.process_summary = summary
            payload.original_request = request
            payload.dedup_stats = dedup
            payload.last_update = utcnow_iso()
            applied.append("finalize")

        session = self._sessions.mutate(session_id, finalize)
        if not applied:
            return self._stop_cancelled(session_id)
        zip_path = self._bundler.create_session_zip(session, session.payload)

        def complete(record: SessionRecord) -> None:
            if is_current_run(record, attempt):
                apply_completion(record, str(zip_path))
                applied.append("complete")

        session = self._sessions.mutate(session_id, complete)
        if "complete" not in applied:
            return self._stop_cancelled(session_id)
        logger.info(
            "Session %s completed (%s reused, %s new)",
            session_id,
            dedup.reused_count,
            dedup.new_count,
            extra={
                "event": "session.completed",
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
            },
        )
        return session

    def _is_current(self, session_id: int, attempt: int) -> bool:
        return is_current_run(self._sessions.get(session_id), attempt)

    def _stop_cancelled(self, session_id: int) -> SessionRecord:
        logger.info(
            "Session %s cancelled or retried; stopping this run",
            session_id,
            extra={"event": "session.cancelled"},
        )
        return self._sessions.get(session_id)

    def _record_progress(
        self, session_id: int, attempt: int, results: List[WordResult], processed: int
    ) -> None:
        snapshot = [result.model_copy(deep=True) for result in results]

        def update(record: SessionRecord) -> None:
            if not is_current_run(record, attempt):
                return
            record.payload.words = snapshot
            record.payload.processed_words = processed
            record.payload.processing = True
            record.payload.last_update = utcnow_iso()

        self._sessions.mutate(session_id, update)

    def _process_word(
        self,
        word: str,
        request: BatchRequest,
        summary: ProcessSummary,
        plan: _AudioPlan,
    ) -> WordResult:
        record = self._words.get_or_create(
            word, request.source_language, request.target_language
        )
        result = WordResult(source_word=word)

        if request.enable_source_audio:
            result.source_audio_file = plan.add(
                record.id,
                "source",
                AudioRequest(word, request.source_voice(), audio_file_stem(word)),
            )

        # Target audio and images need a translation; sentences do not.
        translations: List[str] = []
        if request.enable_translation:
            translations = self._translate(record, request, result, summary)

        if request.enable_target_audio and translations:
            voice = request.target_voice()
            for translation in translations:
                result.target_audio_files.append(
                    plan.add(
                        record.id,
                        "target",
                        AudioRequest(translation, voice, audio_file_stem(translation)),
                    )
                )

        if request.enable_sentence_generation:
            self._generate_sentence(record, request, result, summary, plan)

        if request.enable_image_generation and translations:
            self._generate_image(record, request, result, summary)

        return result

    def _translate(
        self,
        record: WordRecord,
        request: BatchRequest,
        result: WordResult,
        summary: ProcessSummary,
    ) -> List[str]:
        if record.translation_override_at is not None and record.has_translation:
            logger.info(
                "Using manually overridden translation for %r",
                record.word,
                extra={"event": "session.translation_override"},
            )
            result.translation_status = TRANSLATION_SUCCESS
            result.translation_override = True
            result.translations = list(record.translations)
            result.source_transliteration = record.transliteration
            return result.translations

        record_stage_status(self._words, record.id, Stage.TRANSLATION, ProcessingStatus.PROCESSING)
        try:
            if self._translator is None:
                raise RuntimeError("Translation service is not configured")
            data = self._translator.translate(
                record.word,
                request.translation_source_code,
                request.translation_target_code,
            )
            translations = normalize_translations(data.translations)
            if not translations:
                raise ValueError(f"No translation returned for {record.word!r}")
            self._words.update_translation(record.id, translations)
            self._words.update_transliteration(record.id, data.transliteration)
            self._words.add_variant(
                record.id,
                VariantKind.TRANSLATION,
                {"translations": translations, "transliteration": data.transliteration},
            )
        except Exception as exc:
            record_stage_status(self._words, record.id, Stage.TRANSLATION, ProcessingStatus.FAILED)
            logger.warning(
                "Translation failed for %r: %s",
                record.word,
                exc,
                extra={"event": "stage.translation.failed"},
            )
            result.translation_status = FAILED
            result.translation_error = str(exc)
            summary.translation_errors.append(f"Translation failed for {record.word}: {exc}")
            return []

        record_stage_status(self._words, record.id, Stage.TRANSLATION, ProcessingStatus.COMPLETED)
        result.translation_status = TRANSLATION_SUCCESS
        result.translations = translations
        result.source_transliteration = data.transliteration
        return translations

    def _generate_sentence(
        self,
        record: WordRecord,
        request: BatchRequest,
        result: WordResult,
        summary: ProcessSummary,
        plan: _AudioPlan,
    ) -> None:
        try:
            if self._sentences is None:
                raise RuntimeError("Sentence generator is not configured")
            sentence = self._sentences.generate(
                record.word,
                request.translation_source_code,
                request.translation_target_code,
            )
            if sentence is None:
                raise ValueError(f"No sentence generated for {record.word!r}")
        except Exception as exc:
            result.sentence_status = FAILED
            result.sentence_error = str(exc)
            summary.sentence_errors.append(f"Sentence generation failed for {record.word}: {exc}")
            return

        result.sentence_status = TRANSLATION_SUCCESS
        result.sentence_data = sentence.to_dict()
        if sentence.source_language_sentence:
            result.sentence_audio_file = plan.add(
                record.id,
                "sentence",
                AudioRequest(
                    sentence.source_language_sentence,
                    request.source_voice(),
                    audio_file_stem(sentence.source_language_sentence),
                ),
            )
        payload = dict(result.sentence_data)
        payload["audio_file"] = result.sentence_audio_file
        self._words.add_variant(record.id, VariantKind.SENTENCE, payload)

    def _generate_image(
        self,
        record: WordRecord,
        request: BatchRequest,
        result: WordResult,
        summary: ProcessSummary,
    ) -> None:
        current = self._words.get(record.id)
        if current.image_file:
            result.image_status = REUSED
            result.image_file = current.image_file
            result.image_prompt = current.image_prompt
            result.mnemonic_keyword = current.mnemonic_keyword
            result.mnemonic_sentence = current.mnemonic_sentence
            return

        if self._image_worker is None:
            result.image_status = FAILED
            result.image_error = "Image generation is not configured"
            summary.image_errors.append(
                f"Image generation failed for {record.word}: {result.image_error}"
            )
            return

        record_stage_status(self._words, record.id, Stage.IMAGE, ProcessingStatus.PROCESSING)
        try:
            rendered = self._image_worker.render(current, style=request.image_style)
        except Exception as exc:
            record_stage_status(self._words, record.id, Stage.IMAGE, ProcessingStatus.FAILED)
            logger.warning(
                "Image generation failed for %r: %s",
                record.word,
                exc,
                extra={"event": "stage.image.failed"},
            )
            result.image_status = FAILED
            result.image_error = str(exc)
            summary.image_errors.append(f"Image generation failed for {record.word}: {exc}")
            return

        record_stage_status(self._words, record.id, Stage.IMAGE, ProcessingStatus.COMPLETED)
        result.image_status = TRANSLATION_SUCCESS
        result.image_file = rendered.image_file
        result.image_local_path = rendered.image_local_path
        result.image_prompt = rendered.image_prompt
        result.mnemonic_keyword = rendered.mnemonic_keyword
        result.mnemonic_sentence = rendered.mnemonic_sentence

    def _run_audio(self, plan: _AudioPlan, summary: ProcessSummary) -> List[str]:
        if not plan:
            return []
        keys = list(plan.requests)
        for word_id in plan.owners:
            record_stage_status(self._words, word_id, Stage.AUDIO, ProcessingStatus.PROCESSING)
        try:
            outcomes = self._audio.generate([plan.requests[key] for key in keys])
        except Exception as exc:
            logger.error(
                "Audio batch failed: %s",
                exc,
                exc_info=True,
                extra={"event": "audio.batch.failed"},
            )
            summary.audio_errors.append(f"Audio generation batch failed: {exc}")
            summary.audio_failure_count = len(keys)
            self._finish_audio(plan, {})
            return []

        by_key: Dict[tuple, AudioResult] = dict(zip(keys, outcomes))
        audio_files: List[str] = []
        for outcome in outcomes:
            if outcome.succeeded:
                audio_files.append(outcome.local_file_path)
                summary.audio_success_count += 1
            else:
                summary.audio_failure_count += 1
                summary.audio_errors.append(
                    f"Audio generation failed for: {outcome.file_name}"
                )
        self._finish_audio(plan, by_key)
        return audio_files

    def _finish_audio(self, plan: _AudioPlan, outcomes: Dict[tuple, AudioResult]) -> None:
        for word_id, owned in plan.owners.items():
            source_file: Optional[str] = None
            target_file: Optional[str] = None
            succeeded = True
            for role, key in owned:
                outcome = outcomes.get(key)
                if outcome is None or not outcome.succeeded:
                    succeeded = False
                    continue
                if role == "source" and source_file is None:
                    source_file = outcome.file_name
                elif role == "target" and target_file is None:
                    target_file = outcome.file_name
            if source_file or target_file:
                self._words.update_audio(word_id, source_file=source_file, target_file=target_file)
            status = ProcessingStatus.COMPLETED if succeeded else ProcessingStatus.FAILED
            record_stage_status(self._words, word_id, Stage.AUDIO, status)


__all__ = ["BatchOrchestrator"]
