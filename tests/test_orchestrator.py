import asyncio

import pytest

from conftest import (
    MB,
    FakeContentBackend,
    FakeStorage,
    FakeTranscriptionBackend,
    FakeVideoBackend,
    alternative,
)
from interview_analysis.core.exceptions import (
    BackendError,
    BackendErrorCode,
    ConfigurationError,
    ContentAnalysisFailure,
    TranscriptionExhausted,
)
from interview_analysis.core.orchestrator import AnalysisOrchestrator, AnalysisState, build_orchestrator
from interview_analysis.models import scoring
from interview_analysis.models.transcription_orchestrator import TranscriptionOrchestrator
from interview_analysis.schemas.data_models import MediaPayload

ANSWER = ("The virtual DOM is an in memory copy of the real DOM and React diffs it to apply the smallest set "
          "of updates which keeps rendering fast even for large component trees in practice")

AUDIO = MediaPayload(data=b"\x1a\x45\xdf\xa3" * 1024, mime_type="audio/webm")
VIDEO = MediaPayload(data=b"\x00\x00\x00\x18ftyp" * 1024, mime_type="video/mp4")


def build(test_settings, speech=None, video_backend=None, content=None, storage=None):
    speech = speech or FakeTranscriptionBackend(inline=[[alternative(ANSWER, 0.93)]])
    storage = storage or FakeStorage()
    transcription = TranscriptionOrchestrator([speech], storage, test_settings)
    content = content or FakeContentBackend()
    return AnalysisOrchestrator(transcription, content, video_backend, storage, test_settings)


def run_advanced(orchestrator, **kwargs):
    kwargs.setdefault("question", "Explain the virtual DOM")
    kwargs.setdefault("audio", AUDIO)
    return asyncio.run(orchestrator.analyze_advanced(**kwargs))


def test_full_analysis_with_video(test_settings):
    orchestrator = build(test_settings, video_backend=FakeVideoBackend())

    report = run_advanced(orchestrator, video=VIDEO, domain_id="software-engineering-frontend", level="Senior")

    assert report.mode == "advanced"
    assert report.video_status == "analyzed"
    assert report.score_breakdown.weights_used == scoring.WEIGHTS_WITH_VIDEO
    assert report.score == report.score_breakdown.total
    assert report.body_language_analysis.eye_contact == "Excellent"
    assert report.feedback.strengths
    assert report.transcription.text == ANSWER
    assert report.transcription_quality.level == "success"
    assert report.speech_analysis.recommendations
    assert report.state_history == [
        AnalysisState.STARTED.value,
        AnalysisState.FANNED_OUT.value,
        AnalysisState.JOINED.value,
        AnalysisState.CONTENT_SCORED.value,
        AnalysisState.COMPLETE.value,
    ]
    assert report.timestamp.endswith("+00:00")


def test_video_failure_degrades_to_audio_only(test_settings):
    video_backend = FakeVideoBackend(error=BackendError(BackendErrorCode.UNAVAILABLE, "down", "video"))
    orchestrator = build(test_settings, video_backend=video_backend)

    report = run_advanced(orchestrator, video=VIDEO)

    assert report.video_status == "degraded"
    assert report.body_language_analysis is None
    assert report.score_breakdown.weights_used == scoring.WEIGHTS_AUDIO_ONLY
    assert report.score_breakdown.body_language == 0
    assert AnalysisState.VIDEO_DEGRADED.value in report.state_history
    assert report.state_history[-1] == AnalysisState.COMPLETE.value


def test_video_deadline_degrades(test_settings):
    test_settings.VIDEO_TIMEOUT_SECONDS = 0.05
    orchestrator = build(test_settings, video_backend=FakeVideoBackend(hang=True))

    report = run_advanced(orchestrator, video=VIDEO)

    assert report.video_status == "degraded"
    assert report.score_breakdown.weights_used == scoring.WEIGHTS_AUDIO_ONLY


def test_audio_only_request(test_settings):
    video_backend = FakeVideoBackend()
    orchestrator = build(test_settings, video_backend=video_backend)

    report = run_advanced(orchestrator)

    assert report.video_status == "not_supplied"
    assert video_backend.calls == []
    assert report.score_breakdown.weights_used == scoring.WEIGHTS_AUDIO_ONLY


def test_video_without_video_backend_is_unavailable(test_settings):
    orchestrator = build(test_settings, video_backend=None)

    report = run_advanced(orchestrator, video=VIDEO)

    assert report.video_status == "unavailable"
    assert report.body_language_analysis is None


def test_transcription_failure_is_fatal(test_settings):
    speech = FakeTranscriptionBackend(inline=[BackendError(BackendErrorCode.UNAVAILABLE, "down", "speech")] * 3)
    content = FakeContentBackend()
    video_backend = FakeVideoBackend()
    orchestrator = build(test_settings, speech=speech, video_backend=video_backend, content=content)

    with pytest.raises(TranscriptionExhausted):
        run_advanced(orchestrator, video=VIDEO)

    # video ran concurrently but content analysis never started
    assert len(video_backend.calls) == 1
    assert content.prompts == []


def test_content_failure_propagates(test_settings):
    orchestrator = build(test_settings, content=FakeContentBackend(response="I cannot grade this."))

    with pytest.raises(ContentAnalysisFailure):
        run_advanced(orchestrator)


def test_prompt_uses_transcript_and_domain_keywords(test_settings):
    content = FakeContentBackend()
    orchestrator = build(test_settings, content=content)

    run_advanced(orchestrator, domain_id="software-engineering-frontend")

    prompt = content.prompts[0]
    assert ANSWER in prompt
    assert "React" in prompt
    assert "Speech Delivery Metrics" in prompt


def test_low_confidence_transcription_still_scores_with_warning(test_settings):
    speech = FakeTranscriptionBackend(inline=[[alternative(ANSWER, 0.4)], [], []])
    orchestrator = build(test_settings, speech=speech)

    report = run_advanced(orchestrator)

    assert report.transcription_quality.level == "critical"
    assert report.transcription_quality.warning


def test_large_audio_goes_through_staging(test_settings):
    storage = FakeStorage()
    speech = FakeTranscriptionBackend(staged=[[alternative(ANSWER, 0.9)]])
    orchestrator = build(test_settings, speech=speech, storage=storage)

    report = run_advanced(orchestrator, audio=MediaPayload(data=b"\0" * (11 * MB), mime_type="audio/webm"))

    assert report.transcription.text == ANSWER
    assert speech.inline_calls == []
    assert storage.deletes == storage.uploads


def test_standard_mode_is_content_only(test_settings):
    content = FakeContentBackend()
    orchestrator = build(test_settings, content=content)

    report = asyncio.run(orchestrator.analyze_standard(
        "What is the virtual DOM?", "An in-memory tree React diffs.", "software-engineering-frontend", "Junior",
    ))

    assert report.mode == "standard"
    assert report.score == 80
    assert report.score_breakdown is None
    assert report.speech_analysis is None
    assert report.overall_assessment.startswith("A good answer")
    assert "An in-memory tree React diffs." in content.prompts[0]


def test_status_reports_every_service(test_settings):
    status = build(test_settings, video_backend=FakeVideoBackend()).get_status()

    assert status["transcription"]["ready"]
    assert status["video"]["configured"]
    assert status["content"]["name"] == "fake-content"


def test_build_orchestrator_fails_fast_without_configuration(test_settings):
    test_settings.GOOGLE_CLOUD_PROJECT_ID = ""

    with pytest.raises(ConfigurationError):
        build_orchestrator(test_settings)
