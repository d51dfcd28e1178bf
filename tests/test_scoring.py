from dataclasses import replace

import pytest

from conftest import annotations
from interview_analysis.models import scoring
from interview_analysis.models.speech_patterns import empty_metrics
from interview_analysis.models.video_insights import aggregate


def metrics(wpm=140, filler_pct=0.0, long_pauses=0, confidence=90.0):
    return replace(
        empty_metrics(),
        words_per_minute=wpm,
        filler_word_percentage=filler_pct,
        long_pause_count=long_pauses,
        confidence_percentage=confidence,
    )


@pytest.mark.parametrize("weights", [scoring.WEIGHTS_WITH_VIDEO, scoring.WEIGHTS_AUDIO_ONLY])
def test_weights_sum_to_one(weights):
    assert weights.total == pytest.approx(1.0)


def test_weight_selection_follows_video_presence():
    video = aggregate(annotations([[0.9]], [[0.9]]))

    assert scoring.select_weights(video) == scoring.WEIGHTS_WITH_VIDEO
    assert scoring.select_weights(None) == scoring.WEIGHTS_AUDIO_ONLY


def test_ideal_delivery():
    # no penalties: 100 * 0.7 + 90 * 0.3
    assert scoring.delivery_score(metrics()) == pytest.approx(97.0)


@pytest.mark.parametrize("wpm, penalty", [
    (99, 15), (100, 5), (119, 5), (120, 0), (160, 0), (161, 5), (180, 5), (181, 15),
])
def test_pace_penalty_boundaries(wpm, penalty):
    expected = (100 - penalty) * 0.7 + 90 * 0.3
    assert scoring.delivery_score(metrics(wpm=wpm)) == pytest.approx(expected)


def test_filler_and_pause_penalties_are_capped():
    light = scoring.delivery_score(metrics(filler_pct=6.0, long_pauses=4))
    heavy = scoring.delivery_score(metrics(filler_pct=40.0, long_pauses=20))

    assert light == pytest.approx((100 - 12 - 12) * 0.7 + 27)
    assert heavy == pytest.approx((100 - 20 - 15) * 0.7 + 27)


def test_filler_threshold_is_exclusive():
    assert scoring.delivery_score(metrics(filler_pct=5.0, long_pauses=3)) == pytest.approx(97.0)


def test_delivery_is_clamped():
    assert 0.0 <= scoring.delivery_score(metrics(wpm=10, filler_pct=90, long_pauses=30, confidence=0)) <= 100.0


def test_score_with_video():
    video = aggregate(annotations([[0.9]] * 3, [[0.85]]))
    breakdown = scoring.score(80, metrics(), video)

    expected = scoring.round_half_up(80 * 0.60 + 97.0 * 0.25 + video.body_language_insights.numeric_score * 0.15)
    assert breakdown.total == expected
    assert breakdown.weights_used == scoring.WEIGHTS_WITH_VIDEO
    assert breakdown.body_language == video.body_language_insights.numeric_score


def test_audio_only_reweights():
    breakdown = scoring.score(80, metrics())

    assert breakdown.total == 85
    assert breakdown.body_language == 0
    assert breakdown.weights_used == scoring.WEIGHTS_AUDIO_ONLY


def test_missing_delivery_metrics_count_as_zero():
    breakdown = scoring.score(90)

    assert breakdown.delivery == 0
    assert breakdown.total == 63


def test_total_is_an_integer_in_range():
    for content in (-20, 0, 55.5, 100, 150):
        total = scoring.score(content, metrics()).total
        assert isinstance(total, int)
        assert 0 <= total <= 100


def test_half_point_totals_round_up():
    # 70 * 0.70 + 85 * 0.30 = 74.5
    breakdown = scoring.score(70, metrics(confidence=50.0))

    assert breakdown.delivery == pytest.approx(85.0)
    assert breakdown.total == 75


@pytest.mark.parametrize("value, expected", [(74.5, 75), (22.5, 23), (0.5, 1), (74.49, 74), (0.0, 0)])
def test_round_half_up(value, expected):
    assert scoring.round_half_up(value) == expected
