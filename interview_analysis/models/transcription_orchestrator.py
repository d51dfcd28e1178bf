"""
Transcription Orchestrator - strategy cascade across API generations
"""
import asyncio
import dataclasses
import logging
from enum import Enum
from typing import List, Optional, Sequence

from interview_analysis.core.config import Settings, settings as default_settings
from interview_analysis.core.exceptions import (
    BackendError,
    BackendErrorCode,
    ConfigurationError,
    TranscriptionExhausted,
    TranscriptionTimeout,
)
from interview_analysis.models.cloud_storage import ObjectStorage, delete_quietly, extension_for, staging_path
from interview_analysis.models.encoding_strategies import strategies_for
from interview_analysis.models.speech_backends import TranscriptionBackend
from interview_analysis.models.vocabulary import apply_corrections, build_phrase_boosts
from interview_analysis.schemas.data_models import (
    EncodingStrategy,
    MediaPayload,
    RecognitionAlternative,
    RecognitionConfig,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)


class Route(str, Enum):
    INLINE_ONLY = "inline_only"
    INLINE_THEN_STAGED = "inline_then_staged"
    STAGED_ONLY = "staged_only"


def build_transcription_result(
    alternatives: Sequence[RecognitionAlternative], strategy: str = "", backend: str = ""
) -> Optional[TranscriptionResult]:
    """Combine per-result alternatives into one result; None when there is no text"""
    usable = [alt for alt in alternatives if alt.transcript and alt.transcript.strip()]
    if not usable:
        return None

    full_text = " ".join(alt.transcript.strip() for alt in usable).strip()
    confidence = sum(alt.confidence for alt in usable) / len(usable)
    words = [word for alt in usable for word in alt.words]

    # The APIs report no overall duration; the last word's end time stands in
    duration = words[-1].end_time if words else 0.0

    return TranscriptionResult(
        full_text=full_text,
        overall_confidence=confidence,
        words=words,
        duration_seconds=duration,
        word_count=len(words) if words else len(full_text.split()),
        strategy=strategy,
        backend=backend,
    )


class _StagingArea:
    """Uploads the payload at most once per transcribe() call and cleans up after"""

    def __init__(self, store: Optional[ObjectStorage], media: MediaPayload, prefix: str):
        self.store = store
        self.media = media
        self.path = staging_path(prefix, extension_for(media.mime_type))
        self.uri: Optional[str] = None

    async def ensure_uploaded(self) -> str:
        if self.store is None:
            raise ConfigurationError("Cloud Storage is required for long audio transcription but is not configured")
        if self.uri is None:
            self.uri = await self.store.upload(self.media.data, self.path, self.media.mime_type)
        return self.uri

    async def cleanup(self):
        if self.uri is not None:
            await delete_quietly(self.store, self.path)
            self.uri = None


class TranscriptionOrchestrator:
    """
    Turns a media payload into the best available transcription.

    Backends are tried in priority order (newest API generation first). For
    each backend every encoding strategy gets exactly one attempt; a result
    above the acceptance confidence stops everything, weaker results are kept
    as candidates. A later backend runs only when the previous one produced
    no candidate at all.
    """

    def __init__(
        self,
        backends: Sequence[TranscriptionBackend],
        storage: Optional[ObjectStorage] = None,
        settings: Settings = default_settings,
        strategies: Optional[Sequence[EncodingStrategy]] = None,
    ):
        if not backends:
            raise ConfigurationError("At least one transcription backend is required")
        self.backends = list(backends)
        self.storage = storage
        self.settings = settings
        self.strategies = tuple(strategies) if strategies else None

    def route(self, media: MediaPayload) -> Route:
        size_mb = media.size_mb
        if size_mb > self.settings.STAGED_ONLY_MIN_MB:
            return Route.STAGED_ONLY
        if size_mb >= self.settings.INLINE_ONLY_MAX_MB:
            return Route.INLINE_THEN_STAGED
        return Route.INLINE_ONLY

    def staged_timeout_seconds(self, media: MediaPayload) -> float:
        return self.settings.staged_timeout_ms(media.size_mb) / 1000.0

    def is_ready(self) -> bool:
        return any(backend.is_ready() for backend in self.backends)

    async def transcribe(
        self, media: MediaPayload, language_code: Optional[str] = None, domain_id: Optional[str] = None
    ) -> TranscriptionResult:
        language_code = language_code or self.settings.DEFAULT_LANGUAGE_CODE
        route = self.route(media)
        strategies = self.strategies or strategies_for(media.mime_type)
        phrase_boosts = build_phrase_boosts(domain_id)

        if route is Route.STAGED_ONLY and self.storage is None:
            raise ConfigurationError("Cloud Storage is required for payloads over "
                                     f"{self.settings.STAGED_ONLY_MIN_MB:.0f}MB but is not configured")

        logger.info(f"🎤 Starting transcription: {media.size_mb:.2f}MB, route={route.value}, "
                    f"{len(strategies)} strategies x {len(self.backends)} backends")

        staging = _StagingArea(self.storage, media, self.settings.STAGING_PREFIX)
        failures: List[Exception] = []
        best: Optional[TranscriptionResult] = None
        try:
            for backend in self.backends:
                if not backend.is_ready():
                    logger.warning(f"⚠️ Backend {backend.name} not configured, skipping")
                    continue
                best = await self._run_cascade(
                    backend, media, route, strategies, language_code, phrase_boosts, staging, failures
                )
                if best is not None:
                    break
                logger.warning(f"⚠️ Every strategy failed on {backend.name}, falling back to next API generation")
        finally:
            await staging.cleanup()

        if best is None:
            raise self._exhausted(failures)

        corrected = apply_corrections(best.full_text, domain_id)
        logger.info(f"✅ Transcription complete via {best.backend} ({best.strategy}). "
                    f"Length: {len(corrected)} characters, confidence: {best.overall_confidence * 100:.2f}%")
        return dataclasses.replace(best, full_text=corrected)

    async def _run_cascade(
        self, backend, media, route, strategies, language_code, phrase_boosts, staging, failures
    ) -> Optional[TranscriptionResult]:
        candidates: List[TranscriptionResult] = []

        for strategy in strategies:
            config = RecognitionConfig(
                codec=strategy.codec,
                sample_rate_hertz=strategy.sample_rate_hertz,
                language_code=language_code,
                phrase_boosts=phrase_boosts,
            )
            try:
                alternatives = await self._attempt(backend, media, route, config, staging)
            except Exception as e:
                failures.append(e)
                logger.warning(f"⚠️ {backend.name} / {strategy.description} failed: {e}")
                continue

            result = build_transcription_result(alternatives, strategy.description, backend.name)
            if result is None:
                logger.info(f"{backend.name} / {strategy.description} returned no results")
                continue

            if result.overall_confidence > self.settings.CASCADE_ACCEPT_CONFIDENCE:
                logger.info(f"✅ Accepted {backend.name} / {strategy.description} "
                            f"(confidence {result.overall_confidence:.2f})")
                return result

            logger.info(f"Low confidence from {backend.name} / {strategy.description} "
                        f"({result.overall_confidence:.2f}), trying next strategy")
            candidates.append(result)

        if not candidates:
            return None
        return max(candidates, key=lambda r: r.overall_confidence)

    async def _attempt(self, backend, media, route, config, staging) -> List[RecognitionAlternative]:
        if route is Route.STAGED_ONLY:
            return await self._attempt_staged(backend, media, config, staging)

        try:
            return await backend.recognize(media.data, config)
        except BackendError as e:
            if e.code is BackendErrorCode.PAYLOAD_TOO_LONG and route is Route.INLINE_THEN_STAGED:
                logger.info("⏱️ Audio too long for inline recognition, retrying with long-running recognition...")
                return await self._attempt_staged(backend, media, config, staging)
            raise

    async def _attempt_staged(self, backend, media, config, staging) -> List[RecognitionAlternative]:
        uri = await staging.ensure_uploaded()
        timeout = self.staged_timeout_seconds(media)
        logger.info(f"⏱️ Long-running recognition on {backend.name}, deadline {timeout:.0f}s")
        try:
            return await asyncio.wait_for(backend.recognize_staged(uri, config, timeout), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise TranscriptionTimeout(f"Staged job exceeded {timeout:.0f}s on {backend.name}", timeout) from e
        except BackendError as e:
            if e.code is BackendErrorCode.TIMEOUT:
                raise TranscriptionTimeout(f"Staged job exceeded {timeout:.0f}s on {backend.name}", timeout) from e
            raise

    @staticmethod
    def _exhausted(failures: List[Exception]) -> TranscriptionExhausted:
        if failures and all(isinstance(f, TranscriptionTimeout) for f in failures):
            last = failures[-1]
            return TranscriptionTimeout(
                f"Every transcription attempt timed out ({len(failures)} attempts)",
                getattr(last, "timeout_seconds", None),
            )
        return TranscriptionExhausted(
            f"No usable transcription after {len(failures)} failed attempts; "
            "every strategy and API generation failed or returned no text"
        )
