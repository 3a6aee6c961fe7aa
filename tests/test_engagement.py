import pytest

from app.services.engagement import (
    EngagementLevel,
    NoNetworkMetrics,
    QuestionStats,
    RttOnly,
    RttWithJitter,
    classify,
    compute_question_stats,
    nearest_rank,
    network_condition,
)


def _stats(avg_correctness=0.9):
    return QuestionStats(
        median_time=20.0,
        p25_time=10.0,
        p75_time=30.0,
        avg_correctness=avg_correctness,
        sample_size=8,
    )


# ============================================================
# Percentiles and per-question stats
# ============================================================

def test_nearest_rank_picks_existing_samples():
    values = [1.0, 2.0, 3.0, 4.0]
    assert nearest_rank(values, 25) == 1.0
    assert nearest_rank(values, 50) == 2.0
    assert nearest_rank(values, 75) == 3.0
    assert nearest_rank([7.0], 50) == 7.0


def test_compute_question_stats_ignores_zero_times_for_timing():
    stats = compute_question_stats([(0, True), (10, True), (20, False), (30, False)])
    assert stats.sample_size == 3
    assert stats.median_time == 20
    assert stats.avg_correctness == 0.5


def test_compute_question_stats_without_timing_data():
    assert compute_question_stats([]) is None
    assert compute_question_stats([(0, True)]) is None


# ============================================================
# Network condition
# ============================================================

def test_network_condition_variants():
    assert network_condition(None, None) == NoNetworkMetrics()
    assert network_condition(None, 40) == NoNetworkMetrics()
    assert network_condition(120, None) == RttOnly(rtt_ms=120.0)
    assert network_condition(0, 0) == RttWithJitter(rtt_ms=0.0, jitter_ms=0.0)


def test_network_penalties():
    assert NoNetworkMetrics().penalty() == 1.0
    assert RttOnly(rtt_ms=30).penalty() == 1.0
    assert RttOnly(rtt_ms=100).penalty() == pytest.approx(1.06)
    assert RttOnly(rtt_ms=5000).penalty() == pytest.approx(1.3)
    assert RttWithJitter(rtt_ms=100, jitter_ms=50).penalty() == pytest.approx(1.15)
    assert RttWithJitter(rtt_ms=5000, jitter_ms=5000).penalty() == pytest.approx(1.4)


# ============================================================
# Classification
# ============================================================

def test_missing_time_is_passive():
    assert classify(True, None).level == EngagementLevel.PASSIVE
    assert classify(True, 0).level == EngagementLevel.PASSIVE


@pytest.mark.parametrize(
    "is_correct,seconds,expected",
    [
        (True, 10, EngagementLevel.ACTIVE),
        (True, 45, EngagementLevel.MODERATE),
        (False, 5, EngagementLevel.PASSIVE),
        (False, 20, EngagementLevel.MODERATE),
        (False, 45, EngagementLevel.PASSIVE),
    ],
)
def test_fallback_bands_without_stats(is_correct, seconds, expected):
    result = classify(is_correct, seconds)
    assert result.level == expected
    assert result.engagement_score is None


def test_fast_correct_answer_on_hard_question_gets_bonus():
    result = classify(True, 5, stats=_stats(avg_correctness=0.5))
    assert result.speed_score == 1.0
    assert result.difficulty_bonus == pytest.approx(0.1)
    assert result.engagement_score == pytest.approx(1.1)
    assert result.level == EngagementLevel.ACTIVE


def test_no_bonus_for_wrong_answers():
    result = classify(False, 5, stats=_stats(avg_correctness=0.5))
    assert result.difficulty_bonus == 0.0
    assert result.engagement_score == pytest.approx(0.4)
    assert result.level == EngagementLevel.PASSIVE


def test_slow_correct_answer_is_moderate():
    result = classify(True, 35, stats=_stats())
    assert result.speed_score == 0.2
    assert result.engagement_score == pytest.approx(0.68)
    assert result.level == EngagementLevel.MODERATE


def test_between_median_and_p75_scores_point_four():
    result = classify(True, 25, stats=_stats())
    assert result.speed_score == 0.4
    assert result.level == EngagementLevel.ACTIVE


def test_network_penalty_shortens_time_before_comparison():
    stats = _stats()
    plain = classify(True, 12, stats=stats)
    laggy = classify(True, 12, stats=stats, network=RttOnly(rtt_ms=5000))

    assert plain.speed_score == 0.7
    assert laggy.adjusted_time == pytest.approx(12 / 1.3)
    assert laggy.speed_score == 1.0


def test_network_condition_never_changes_correctness():
    stats = _stats()
    good = classify(True, 20, stats=stats, network=RttWithJitter(rtt_ms=30, jitter_ms=5))
    poor = classify(True, 20, stats=stats, network=RttWithJitter(rtt_ms=250, jitter_ms=50))

    assert good.correctness_score == poor.correctness_score == 1.0
    for result in (good, poor):
        assert 1.0 <= result.penalty <= 1.5
    assert poor.penalty > good.penalty
    assert poor.adjusted_time < good.adjusted_time
