"""
Composite Scoring Engine
"""
import math
from typing import Optional

from interview_analysis.schemas.data_models import (
    CompositeScoreBreakdown,
    ScoreWeights,
    SpeechPatternMetrics,
    VideoAnalysisResult,
)

WEIGHTS_WITH_VIDEO = ScoreWeights(content=0.60, delivery=0.25, body_language=0.15)
WEIGHTS_AUDIO_ONLY = ScoreWeights(content=0.70, delivery=0.30, body_language=0.0)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (74.5 -> 75)"""
    return int(math.floor(value + 0.5))


def select_weights(video: Optional[VideoAnalysisResult]) -> ScoreWeights:
    return WEIGHTS_WITH_VIDEO if video is not None else WEIGHTS_AUDIO_ONLY


def delivery_score(metrics: SpeechPatternMetrics) -> float:
    """Start at 100, subtract pace/filler/pause penalties, blend in recognizer confidence"""
    score = 100.0

    wpm = metrics.words_per_minute
    if wpm < 100 or wpm > 180:
        score -= 15
    elif wpm < 120 or wpm > 160:
        score -= 5

    if metrics.filler_word_percentage > 5:
        score -= min(20.0, metrics.filler_word_percentage * 2)

    if metrics.long_pause_count > 3:
        score -= min(15, metrics.long_pause_count * 3)

    score = score * 0.7 + metrics.confidence_percentage * 0.3
    return _clamp(score)


def score(
    content: float,
    delivery: Optional[SpeechPatternMetrics] = None,
    video: Optional[VideoAnalysisResult] = None,
) -> CompositeScoreBreakdown:
    """
    Blend content, delivery and body language into one 0-100 score.

    Without video the weights shift to content 0.70 / delivery 0.30 and the
    body-language sub-score is 0.
    """
    weights = select_weights(video)

    content_part = _clamp(float(content or 0))
    delivery_part = delivery_score(delivery) if delivery is not None else 0.0
    body_part = _clamp(float(video.body_language_insights.numeric_score)) if video is not None else 0.0

    total = round_half_up(
        content_part * weights.content
        + delivery_part * weights.delivery
        + body_part * weights.body_language
    )

    return CompositeScoreBreakdown(
        content=content_part,
        delivery=round(delivery_part, 2),
        body_language=body_part,
        total=int(_clamp(total)),
        weights_used=weights,
    )
