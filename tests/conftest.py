# File: tests/conftest.py

import asyncio
from typing import List, Optional

import pytest

from interview_analysis.core.config import Settings
from interview_analysis.models.cloud_storage import ObjectStorage
from interview_analysis.models.gemini_analyzer import ContentAnalysisBackend
from interview_analysis.models.speech_backends import TranscriptionBackend
from interview_analysis.models.video_insights import VideoAnalysisBackend
from interview_analysis.schemas.data_models import (
    DetectionTrack,
    RecognitionAlternative,
    RemoteVideoAnnotations,
    TranscriptWord,
)

MB = 1024 * 1024


# --- Builders ---

def make_words(text: str, confidence: float = 0.9, word_seconds: float = 0.4, gap: float = 0.1,
               start: float = 0.0) -> List[TranscriptWord]:
    """Evenly spaced words: each lasts word_seconds, separated by gap"""
    words = []
    t = start
    for token in text.split():
        words.append(TranscriptWord(text=token, start_time=t, end_time=t + word_seconds, confidence=confidence))
        t += word_seconds + gap
    return words


def alternative(text: str, confidence: float = 0.9, with_words: bool = True) -> RecognitionAlternative:
    return RecognitionAlternative(
        transcript=text,
        confidence=confidence,
        words=make_words(text, confidence) if with_words else [],
    )


def annotations(person_confidences: Optional[List[List[float]]] = None,
                face_confidences: Optional[List[List[float]]] = None) -> RemoteVideoAnnotations:
    return RemoteVideoAnnotations(
        person_tracks=[DetectionTrack(confidences=c) for c in (person_confidences or [])],
        face_tracks=[DetectionTrack(confidences=c) for c in (face_confidences or [])],
    )


class Hang:
    """Scripted step that sleeps longer than any test deadline"""

    def __init__(self, seconds: float = 5.0):
        self.seconds = seconds


async def _play(script: list, default):
    step = script.pop(0) if script else default
    if isinstance(step, Hang):
        await asyncio.sleep(step.seconds)
        return default
    if isinstance(step, BaseException):
        raise step
    return step


# --- Fake backends ---

class FakeTranscriptionBackend(TranscriptionBackend):
    """
    Plays back scripted outcomes, one per call. Each step is a list of
    alternatives, an exception instance, or a Hang.
    """

    def __init__(self, name: str = "fake-speech", inline=None, staged=None, ready: bool = True):
        self.name = name
        self.inline_script = list(inline or [])
        self.staged_script = list(staged or [])
        self.ready = ready
        self.inline_calls = []
        self.staged_calls = []

    async def recognize(self, audio, config):
        self.inline_calls.append(config)
        return await _play(self.inline_script, [])

    async def recognize_staged(self, uri, config, timeout_seconds):
        self.staged_calls.append((uri, config, timeout_seconds))
        return await _play(self.staged_script, [])

    def is_ready(self) -> bool:
        return self.ready


class FakeStorage(ObjectStorage):
    def __init__(self, fail_upload: bool = False, fail_delete: bool = False):
        self.fail_upload = fail_upload
        self.fail_delete = fail_delete
        self.objects = {}
        self.uploads = []
        self.deletes = []

    async def upload(self, data, path, content_type):
        self.uploads.append(path)
        if self.fail_upload:
            raise RuntimeError("bucket unavailable")
        self.objects[path] = data
        return f"gs://test-bucket/{path}"

    async def delete(self, path):
        self.deletes.append(path)
        if self.fail_delete:
            raise RuntimeError("delete refused")
        self.objects.pop(path, None)


class FakeVideoBackend(VideoAnalysisBackend):
    name = "fake-video"

    def __init__(self, result=None, error: Optional[Exception] = None, hang: bool = False):
        self.result = result if result is not None else annotations([[0.9]] * 3, [[0.85]])
        self.error = error
        self.hang = hang
        self.calls = []

    async def annotate(self, uri, timeout_seconds):
        self.calls.append((uri, timeout_seconds))
        if self.hang:
            await asyncio.sleep(5)
        if self.error:
            raise self.error
        return self.result


CONTENT_RESPONSE = """**SCORE: 80**

**STRENGTHS:**
- Clear explanation of the virtual DOM
- Mentioned reconciliation

**IMPROVEMENTS:**
- Give a concrete example

**TECHNICAL_ACCURACY: 85**
Accurate overall.

**CLARITY: 75**
Mostly clear.

**RELEVANCE: 90**
On topic.

**DOMAIN_INSIGHTS:**
Solid grasp of React rendering.

**OVERALL:**
A good answer that would benefit from an example.
"""


class FakeContentBackend(ContentAnalysisBackend):
    name = "fake-content"

    def __init__(self, response: str = CONTENT_RESPONSE, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.response


# --- Fixtures ---

@pytest.fixture
def test_settings():
    """Settings with production thresholds and short deadlines"""
    s = Settings()
    s.GOOGLE_CLOUD_PROJECT_ID = "test-project"
    s.GEMINI_API_KEY = "test-key"
    s.STAGING_PREFIX = "transcription-temp"
    s.INLINE_ONLY_MAX_MB = 1.0
    s.STAGED_ONLY_MIN_MB = 10.0
    s.CASCADE_ACCEPT_CONFIDENCE = 0.5
    s.QUALITY_CRITICAL_BELOW = 0.7
    s.QUALITY_WARNING_BELOW = 0.85
    s.QUALITY_MIN_WORDS = 20
    s.LONG_PAUSE_SECONDS = 2.0
    s.STAGED_TIMEOUT_BASE_MS = 300_000
    s.STAGED_TIMEOUT_PER_MB_MS = 60_000
    s.STAGED_TIMEOUT_MAX_MS = 600_000
    s.VIDEO_TIMEOUT_SECONDS = 5.0
    s.VIDEO_STAGING_PREFIX = "interview-recordings"
    return s


@pytest.fixture
def storage():
    return FakeStorage()
