"""
Core Orchestrator - multi-modal interview response analysis
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from interview_analysis.core.config import Settings, settings as default_settings
from interview_analysis.core.exceptions import ConfigurationError, VideoAnalysisDegraded
from interview_analysis.models import scoring, speech_patterns
from interview_analysis.models.cloud_storage import GCSObjectStorage, ObjectStorage
from interview_analysis.models.gemini_analyzer import (
    ContentAnalysisBackend,
    GeminiAnalyzer,
    GeminiContentBackend,
    build_advanced_prompt,
    build_standard_prompt,
)
from interview_analysis.models.interview_domains import get_domain_by_id
from interview_analysis.models.speech_backends import GoogleSpeechV1Backend, GoogleSpeechV2Backend
from interview_analysis.models.transcription_orchestrator import TranscriptionOrchestrator
from interview_analysis.models.transcription_quality import evaluate_transcription_quality
from interview_analysis.models.video_insights import (
    GoogleVideoIntelligenceBackend,
    VideoAnalysisBackend,
    analyze_video_payload,
)
from interview_analysis.schemas.data_models import (
    AnalysisReport,
    BodyLanguageAnalysis,
    ContentAnalysis,
    ContentFeedback,
    MediaPayload,
    SpeechAnalysis,
    SpeechPatternMetrics,
    TranscriptionResult,
    TranscriptionSummary,
    VideoAnalysisResult,
)

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    STARTED = "started"
    FANNED_OUT = "fanned_out"
    JOINED = "joined"
    CONTENT_SCORED = "content_scored"
    COMPLETE = "complete"
    AUDIO_FAILED = "audio_failed"
    VIDEO_DEGRADED = "video_degraded"


class VideoStatus(str, Enum):
    ANALYZED = "analyzed"
    NOT_SUPPLIED = "not_supplied"
    UNAVAILABLE = "unavailable"
    DEGRADED = "degraded"


class _AnalysisRun:
    """Request-scoped state trail"""

    def __init__(self, mode: str):
        self.mode = mode
        self.history: List[AnalysisState] = []
        self.advance(AnalysisState.STARTED)

    def advance(self, state: AnalysisState):
        self.history.append(state)
        logger.info(f"🔄 [{self.mode}] {state.value}")

    @property
    def state(self) -> AnalysisState:
        return self.history[-1]

    def trail(self) -> List[str]:
        return [s.value for s in self.history]


def _keywords(domain, expected_keywords: Optional[List[str]]) -> List[str]:
    if expected_keywords:
        return list(expected_keywords)
    return list(domain.keywords) if domain else []


class AnalysisOrchestrator:
    """
    Runs one interview response through transcription, optional video
    analysis, content analysis and composite scoring.

    Transcription and video run concurrently. A transcription failure is
    fatal; a video failure only drops the body-language dimension and the
    scoring weights rebalance to audio-only.
    """

    def __init__(
        self,
        transcription: TranscriptionOrchestrator,
        content_backend: ContentAnalysisBackend,
        video_backend: Optional[VideoAnalysisBackend] = None,
        storage: Optional[ObjectStorage] = None,
        settings: Settings = default_settings,
    ):
        self.transcription = transcription
        self.content_backend = content_backend
        self.gemini_analyzer = GeminiAnalyzer(content_backend)
        self.video_backend = video_backend
        self.storage = storage
        self.settings = settings

    @property
    def video_enabled(self) -> bool:
        return self.video_backend is not None and self.storage is not None

    async def analyze_standard(
        self,
        question: str,
        response_text: str,
        domain_id: Optional[str] = None,
        level: Optional[str] = None,
        expected_keywords: Optional[List[str]] = None,
    ) -> AnalysisReport:
        """Content-only analysis of a typed answer"""
        run = _AnalysisRun("standard")
        domain = get_domain_by_id(domain_id)

        prompt = build_standard_prompt(question, response_text, domain, level, _keywords(domain, expected_keywords))
        content = await self.gemini_analyzer.analyze(prompt)
        run.advance(AnalysisState.CONTENT_SCORED)

        run.advance(AnalysisState.COMPLETE)
        return AnalysisReport(
            mode="standard",
            score=content.score,
            feedback=self._feedback(content),
            domain_insights=content.domain_insights,
            overall_assessment=content.overall,
            video_status=VideoStatus.NOT_SUPPLIED.value,
            state_history=run.trail(),
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata={"domain_id": domain_id or "", "level": level or ""},
        )

    async def analyze_advanced(
        self,
        question: str,
        audio: MediaPayload,
        video: Optional[MediaPayload] = None,
        domain_id: Optional[str] = None,
        level: Optional[str] = None,
        expected_keywords: Optional[List[str]] = None,
        language_code: Optional[str] = None,
    ) -> AnalysisReport:
        """
        Full multi-modal analysis of a recorded answer.

        Raises:
            TranscriptionExhausted: no usable transcription (TranscriptionTimeout
                when every attempt timed out)
            ContentAnalysisFailure: the content service failed or its answer
                could not be parsed
        """
        run = _AnalysisRun("advanced")
        domain = get_domain_by_id(domain_id)

        branches = {"transcription": self.transcription.transcribe(audio, language_code, domain_id)}
        if video is not None and self.video_enabled:
            branches["video"] = analyze_video_payload(
                self.video_backend,
                self.storage,
                video,
                self.settings.VIDEO_TIMEOUT_SECONDS,
                self.settings.VIDEO_STAGING_PREFIX,
            )
            video_status = VideoStatus.ANALYZED
        elif video is not None:
            logger.warning("⚠️ Video supplied but video analysis is not configured, continuing audio-only")
            video_status = VideoStatus.UNAVAILABLE
        else:
            video_status = VideoStatus.NOT_SUPPLIED

        run.advance(AnalysisState.FANNED_OUT)
        results = await asyncio.gather(*branches.values(), return_exceptions=True)
        outcomes: Dict[str, Any] = dict(zip(branches.keys(), results))
        run.advance(AnalysisState.JOINED)

        transcription = outcomes["transcription"]
        if isinstance(transcription, BaseException):
            run.advance(AnalysisState.AUDIO_FAILED)
            logger.error(f"❌ Transcription failed: {transcription}")
            raise transcription

        video_result: Optional[VideoAnalysisResult] = None
        if "video" in outcomes:
            outcome = outcomes["video"]
            if isinstance(outcome, VideoAnalysisDegraded):
                run.advance(AnalysisState.VIDEO_DEGRADED)
                logger.warning(f"⚠️ Continuing without body language: {outcome}")
                video_status = VideoStatus.DEGRADED
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                video_result = outcome

        metrics = speech_patterns.analyze(transcription, self.settings.LONG_PAUSE_SECONDS)

        prompt = build_advanced_prompt(
            question,
            transcription.full_text,
            domain,
            level,
            _keywords(domain, expected_keywords),
            speech=metrics,
            video=video_result,
        )
        content = await self.gemini_analyzer.analyze(prompt)
        run.advance(AnalysisState.CONTENT_SCORED)

        breakdown = scoring.score(content.score, metrics, video_result)
        quality = evaluate_transcription_quality(transcription, self.settings)

        run.advance(AnalysisState.COMPLETE)
        logger.info(f"✅ Analysis complete: score {breakdown.total} "
                    f"(content {breakdown.content:.0f}, delivery {breakdown.delivery:.0f}, "
                    f"body language {breakdown.body_language:.0f}), video {video_status.value}")

        return AnalysisReport(
            mode="advanced",
            score=breakdown.total,
            score_breakdown=breakdown,
            feedback=self._feedback(content),
            domain_insights=content.domain_insights,
            overall_assessment=content.overall,
            speech_analysis=self._speech_analysis(metrics),
            body_language_analysis=self._body_language_analysis(video_result),
            video_status=video_status.value,
            transcription=self._transcription_summary(transcription),
            transcription_quality=quality,
            state_history=run.trail(),
            timestamp=datetime.now(timezone.utc).isoformat(),
            metadata={
                "domain_id": domain_id or "",
                "level": level or "",
                "transcription_backend": transcription.backend,
                "transcription_strategy": transcription.strategy,
            },
        )

    @staticmethod
    def _feedback(content: ContentAnalysis) -> ContentFeedback:
        return ContentFeedback(
            strengths=list(content.strengths),
            improvements=list(content.improvements),
            technical_accuracy=content.technical_accuracy,
            clarity=content.clarity,
            relevance=content.relevance,
        )

    @staticmethod
    def _speech_analysis(metrics: SpeechPatternMetrics) -> SpeechAnalysis:
        return SpeechAnalysis(
            words_per_minute=metrics.words_per_minute,
            filler_word_count=metrics.filler_word_count,
            filler_word_percentage=metrics.filler_word_percentage,
            average_pause_seconds=metrics.average_pause_seconds,
            long_pause_count=metrics.long_pause_count,
            confidence_percentage=metrics.confidence_percentage,
            recommendations=speech_patterns.generate_speech_recommendations(metrics),
        )

    @staticmethod
    def _body_language_analysis(video: Optional[VideoAnalysisResult]) -> Optional[BodyLanguageAnalysis]:
        if video is None:
            return None
        insights = video.body_language_insights
        return BodyLanguageAnalysis(
            eye_contact=insights.eye_contact_label,
            body_movement=insights.movement_label,
            overall_presence=insights.overall_presence_label,
            numeric_score=insights.numeric_score,
            recommendations=list(insights.recommendations),
        )

    @staticmethod
    def _transcription_summary(result: TranscriptionResult) -> TranscriptionSummary:
        return TranscriptionSummary(
            text=result.full_text,
            confidence=result.overall_confidence,
            word_count=result.word_count,
            duration_seconds=result.duration_seconds,
        )

    def get_status(self) -> Dict[str, Any]:
        return {
            "transcription": {
                "ready": self.transcription.is_ready(),
                "backends": [b.get_status() for b in self.transcription.backends],
            },
            "storage": self.storage.get_status() if self.storage else {"configured": False},
            "video": self.video_backend.get_status() if self.video_backend else {"configured": False},
            "content": self.content_backend.get_status(),
        }


def build_orchestrator(settings: Settings = default_settings) -> AnalysisOrchestrator:
    """
    Create every remote client once and wire them together.

    Raises ConfigurationError when the required settings are missing or no
    transcription backend can be initialized. Storage and video analysis are
    optional: without them long audio and video are unavailable.
    """
    settings.validate()
    executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="google-cloud")

    backends = []
    for factory in (
        lambda: GoogleSpeechV2Backend(settings.GOOGLE_CLOUD_PROJECT_ID, settings.SPEECH_LOCATION, executor=executor),
        lambda: GoogleSpeechV1Backend(settings.GOOGLE_CLOUD_PROJECT_ID, settings.GOOGLE_APPLICATION_CREDENTIALS,
                                      executor=executor),
    ):
        try:
            backends.append(factory())
        except ConfigurationError as e:
            logger.warning(f"⚠️ {e}")
    if not backends:
        raise ConfigurationError("No Speech-to-Text generation could be initialized")

    storage: Optional[ObjectStorage] = None
    try:
        storage = GCSObjectStorage(settings.GCS_BUCKET_NAME, settings.GOOGLE_CLOUD_PROJECT_ID, executor=executor)
    except ConfigurationError as e:
        logger.warning(f"⚠️ Cloud Storage unavailable, long audio and video disabled: {e}")

    video_backend: Optional[VideoAnalysisBackend] = None
    try:
        video_backend = GoogleVideoIntelligenceBackend(settings.GOOGLE_CLOUD_PROJECT_ID, executor=executor)
    except ConfigurationError as e:
        logger.warning(f"⚠️ Video Intelligence unavailable, body language disabled: {e}")

    content_backend = GeminiContentBackend(
        settings.GEMINI_API_KEY,
        settings.GEMINI_MODEL,
        settings.GEMINI_MAX_RETRIES,
    )

    transcription = TranscriptionOrchestrator(backends, storage=storage, settings=settings)
    logger.info(f"✅ Analysis pipeline ready: {', '.join(b.name for b in backends)}")
    return AnalysisOrchestrator(transcription, content_backend, video_backend, storage, settings)
