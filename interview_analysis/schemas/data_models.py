from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict


class AudioEncoding(str, Enum):
    WEBM_OPUS = "WEBM_OPUS"
    OGG_OPUS = "OGG_OPUS"
    LINEAR16 = "LINEAR16"
    FLAC = "FLAC"
    MP3 = "MP3"


@dataclass(frozen=True)
class MediaPayload:
    """Raw recorded media as received from the caller"""
    data: bytes
    mime_type: str = "audio/webm"

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)


@dataclass(frozen=True)
class EncodingStrategy:
    """One (codec, sample rate) pair tried during transcription"""
    codec: AudioEncoding
    sample_rate_hertz: Optional[int]
    description: str


@dataclass(frozen=True)
class PhraseBoost:
    phrase: str
    boost: float


@dataclass(frozen=True)
class RecognitionConfig:
    """Backend-agnostic request config for one transcription attempt"""
    codec: AudioEncoding
    sample_rate_hertz: Optional[int]
    language_code: str
    phrase_boosts: Tuple[PhraseBoost, ...] = ()
    punctuation: bool = True
    word_timestamps: bool = True
    word_confidence: bool = True


@dataclass(frozen=True)
class TranscriptWord:
    text: str
    start_time: float
    end_time: float
    confidence: float


@dataclass(frozen=True)
class RecognitionAlternative:
    """Best alternative of one recognition result, mapped from the vendor response"""
    transcript: str
    confidence: float
    words: List[TranscriptWord] = field(default_factory=list)


@dataclass(frozen=True)
class TranscriptionResult:
    """Best transcription of one media payload"""
    full_text: str
    overall_confidence: float
    words: List[TranscriptWord] = field(default_factory=list)
    duration_seconds: float = 0.0
    word_count: int = 0

    # Which attempt produced it (informational)
    strategy: str = ""
    backend: str = ""


@dataclass(frozen=True)
class FillerWordCount:
    word: str
    count: int


@dataclass(frozen=True)
class SpeechPatternMetrics:
    """Delivery metrics derived from word-level transcription output"""
    words_per_minute: int
    filler_words: List[FillerWordCount]
    filler_word_count: int
    filler_word_percentage: float
    average_pause_seconds: float
    long_pause_count: int
    confidence_percentage: float
    total_words: int
    duration_seconds: float


@dataclass(frozen=True)
class DetectionTrack:
    """Per-segment confidences of one person or face track"""
    confidences: List[float] = field(default_factory=list)

    @property
    def average_confidence(self) -> float:
        if not self.confidences:
            return 0.0
        return sum(self.confidences) / len(self.confidences)


@dataclass(frozen=True)
class RemoteVideoAnnotations:
    person_tracks: List[DetectionTrack] = field(default_factory=list)
    face_tracks: List[DetectionTrack] = field(default_factory=list)


@dataclass(frozen=True)
class PersonDetection:
    detected: bool
    confidence: float
    track_count: int


@dataclass(frozen=True)
class FaceDetection:
    detected: bool
    confidence: float
    track_count: int


@dataclass(frozen=True)
class BodyLanguageInsights:
    eye_contact_label: str
    movement_label: str
    overall_presence_label: str
    numeric_score: int
    eye_contact_score: float
    movement_score: float
    confidence: float
    recommendations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class VideoAnalysisResult:
    person_detection: PersonDetection
    face_detection: FaceDetection
    body_language_insights: BodyLanguageInsights


@dataclass(frozen=True)
class ContentAnalysis:
    """Structured output parsed from the content-analysis service"""
    score: int
    strengths: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    technical_accuracy: int = 0
    clarity: int = 0
    relevance: int = 0
    domain_insights: str = ""
    overall: str = ""


class ScoreWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: float
    delivery: float
    body_language: float

    @property
    def total(self) -> float:
        return self.content + self.delivery + self.body_language


class CompositeScoreBreakdown(BaseModel):
    content: float
    delivery: float
    body_language: float
    total: int
    weights_used: ScoreWeights


class TranscriptionQualityAssessment(BaseModel):
    level: str  # "error", "critical", "warning", "info" or "success"
    warning: bool
    message: str
    suggestions: List[str] = []


class ContentFeedback(BaseModel):
    strengths: List[str]
    improvements: List[str]
    technical_accuracy: int
    clarity: int
    relevance: int


class SpeechAnalysis(BaseModel):
    words_per_minute: int
    filler_word_count: int
    filler_word_percentage: float
    average_pause_seconds: float
    long_pause_count: int
    confidence_percentage: float
    recommendations: List[str]


class BodyLanguageAnalysis(BaseModel):
    eye_contact: str
    body_movement: str
    overall_presence: str
    numeric_score: int
    recommendations: List[str]


class TranscriptionSummary(BaseModel):
    text: str
    confidence: float
    word_count: int
    duration_seconds: float


class AnalysisReport(BaseModel):
    """Final assessment of one interview response"""
    mode: str  # "standard" or "advanced"
    score: int
    score_breakdown: Optional[CompositeScoreBreakdown] = None
    feedback: ContentFeedback
    domain_insights: str
    overall_assessment: str
    speech_analysis: Optional[SpeechAnalysis] = None
    body_language_analysis: Optional[BodyLanguageAnalysis] = None
    video_status: str = "not_supplied"  # "analyzed", "not_supplied", "unavailable", "degraded"
    transcription: Optional[TranscriptionSummary] = None
    transcription_quality: Optional[TranscriptionQualityAssessment] = None
    state_history: List[str] = []
    timestamp: str
    metadata: Dict[str, str] = {}
