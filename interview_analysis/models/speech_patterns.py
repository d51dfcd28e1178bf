"""
Speech Pattern Analyzer - delivery metrics from word-level transcription
"""
import math
import re
from typing import List

from interview_analysis.models.scoring import round_half_up
from interview_analysis.schemas.data_models import FillerWordCount, SpeechPatternMetrics, TranscriptionResult

FILLER_WORDS = ["um", "uh", "like", "you know", "basically", "actually", "literally", "so", "well", "i mean"]
LONG_PAUSE_SECONDS = 2.0

_FILLER_PATTERNS = [
    (filler, re.compile(r"\b" + re.escape(filler) + r"\b", re.IGNORECASE)) for filler in FILLER_WORDS
]


def empty_metrics() -> SpeechPatternMetrics:
    return SpeechPatternMetrics(
        words_per_minute=0,
        filler_words=[],
        filler_word_count=0,
        filler_word_percentage=0.0,
        average_pause_seconds=0.0,
        long_pause_count=0,
        confidence_percentage=0.0,
        total_words=0,
        duration_seconds=0.0,
    )


def count_fillers(text: str) -> List[FillerWordCount]:
    counts = []
    for filler, pattern in _FILLER_PATTERNS:
        found = len(pattern.findall(text))
        if found:
            counts.append(FillerWordCount(word=filler, count=found))
    return counts


def analyze(result: TranscriptionResult, long_pause_seconds: float = LONG_PAUSE_SECONDS) -> SpeechPatternMetrics:
    """
    Derive delivery metrics from a transcription.

    Pure: no I/O and no failure mode. An empty word list or a zero duration
    yields all-zero metrics.
    """
    words = result.words
    duration = result.duration_seconds or 0.0
    if not words or not result.full_text or not math.isfinite(duration) or duration <= 0:
        return empty_metrics()

    word_count = len(words)
    words_per_minute = round_half_up(word_count / duration * 60)

    filler_words = count_fillers(result.full_text)
    filler_count = sum(f.count for f in filler_words)

    pauses = []
    for previous, current in zip(words, words[1:]):
        gap = current.start_time - previous.end_time
        if gap > 0:
            pauses.append(gap)
    average_pause = sum(pauses) / len(pauses) if pauses else 0.0
    long_pauses = sum(1 for p in pauses if p > long_pause_seconds)

    average_confidence = sum(w.confidence for w in words) / word_count

    return SpeechPatternMetrics(
        words_per_minute=words_per_minute,
        filler_words=filler_words,
        filler_word_count=filler_count,
        filler_word_percentage=round(filler_count / word_count * 100, 2),
        average_pause_seconds=round(average_pause, 2),
        long_pause_count=long_pauses,
        confidence_percentage=round(average_confidence * 100, 2),
        total_words=word_count,
        duration_seconds=round(duration, 2),
    )


def generate_speech_recommendations(metrics: SpeechPatternMetrics) -> List[str]:
    """Short coaching notes on pace, filler words and pauses"""
    recommendations = []

    wpm = metrics.words_per_minute
    if wpm < 100:
        recommendations.append("Try to speak a bit faster - aim for 120-150 words per minute")
    elif wpm > 180:
        recommendations.append("Slow down your speech pace - aim for 120-150 words per minute")
    else:
        recommendations.append("Great speech pace - keep it up!")

    if metrics.filler_word_percentage > 5:
        recommendations.append('Reduce filler words like "um", "uh", "like" - pause instead')
    elif metrics.filler_word_percentage > 2:
        recommendations.append("Good job minimizing filler words, keep working on it")

    if metrics.long_pause_count > 3:
        recommendations.append("Try to reduce long pauses - brief pauses are natural and good")

    return recommendations
