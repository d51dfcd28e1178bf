from dataclasses import replace

import pytest

from conftest import make_words
from interview_analysis.models.speech_patterns import (
    analyze,
    count_fillers,
    empty_metrics,
    generate_speech_recommendations,
)
from interview_analysis.schemas.data_models import TranscriptionResult, TranscriptWord


def result_from(words, text=None, duration=None, confidence=0.9):
    text = text if text is not None else " ".join(w.text for w in words)
    return TranscriptionResult(
        full_text=text,
        overall_confidence=confidence,
        words=words,
        duration_seconds=duration if duration is not None else (words[-1].end_time if words else 0.0),
        word_count=len(words),
    )


def test_words_per_minute_from_duration():
    # 10 words, 0.4s each with 0.1s gaps -> 4.9s
    words = make_words("one two three four five six seven eight nine ten")
    metrics = analyze(result_from(words))

    assert metrics.total_words == 10
    assert metrics.duration_seconds == pytest.approx(4.9)
    assert metrics.words_per_minute == 122


def test_words_per_minute_rounds_halves_up():
    # 3 words over 8s -> 22.5 wpm
    metrics = analyze(result_from(make_words("one two three"), duration=8.0))

    assert metrics.words_per_minute == 23


def test_zero_duration_gives_zero_metrics():
    words = [TranscriptWord("hi", 0.0, 0.0, 0.9), TranscriptWord("there", 0.0, 0.0, 0.9)]
    metrics = analyze(result_from(words, duration=0.0))

    assert metrics == empty_metrics()
    assert metrics.words_per_minute == 0


def test_empty_word_list_gives_zero_metrics():
    metrics = analyze(result_from([], text="something was said", duration=3.0))

    assert metrics.words_per_minute == 0
    assert metrics.total_words == 0
    assert metrics.filler_word_percentage == 0.0


def test_analyze_is_idempotent():
    result = result_from(make_words("so um I basically built the api you know"))

    assert analyze(result) == analyze(result)


def test_fillers_match_whole_words_case_insensitive():
    fillers = {f.word: f.count for f in count_fillers("Um, so I mean... UM I like it. Soldiers are well trained.")}

    assert fillers["um"] == 2
    assert fillers["so"] == 1
    assert fillers["i mean"] == 1
    assert fillers["like"] == 1
    assert fillers["well"] == 1
    assert "uh" not in fillers


def test_filler_percentage():
    text = "um I think um the answer is actually simple"
    metrics = analyze(result_from(make_words(text)))

    assert metrics.filler_word_count == 3
    assert metrics.filler_word_percentage == pytest.approx(round(3 / 9 * 100, 2))


def test_pauses_and_long_pauses():
    words = [
        TranscriptWord("first", 0.0, 0.5, 0.9),
        TranscriptWord("second", 1.0, 1.5, 0.9),   # 0.5s gap
        TranscriptWord("third", 4.0, 4.5, 0.9),    # 2.5s gap, long
        TranscriptWord("fourth", 4.5, 5.0, 0.9),   # no gap
        TranscriptWord("fifth", 7.0, 7.5, 0.9),    # exactly 2.0s, not long
    ]
    metrics = analyze(result_from(words))

    assert metrics.long_pause_count == 1
    assert metrics.average_pause_seconds == pytest.approx(round((0.5 + 2.5 + 2.0) / 3, 2))


def test_confidence_percentage_is_mean_word_confidence():
    words = [TranscriptWord("a", 0.0, 0.5, 0.8), TranscriptWord("b", 0.5, 1.0, 0.6)]
    metrics = analyze(result_from(words))

    assert metrics.confidence_percentage == pytest.approx(70.0)


def test_recommendations_follow_pace_fillers_and_pauses():
    base = empty_metrics()

    slow = generate_speech_recommendations(replace(base, words_per_minute=80))
    messy = generate_speech_recommendations(
        replace(base, words_per_minute=200, filler_word_percentage=8.0, long_pause_count=4)
    )
    steady = generate_speech_recommendations(replace(base, words_per_minute=140))

    assert any("speak a bit faster" in t for t in slow)
    assert any("Slow down" in t for t in messy)
    assert any("filler words" in t for t in messy)
    assert any("long pauses" in t for t in messy)
    assert steady == ["Great speech pace - keep it up!"]
