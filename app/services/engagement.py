"""
Engagement Scoring

Classifies a single response as Active, Moderate or Passive from its
correctness and how fast it was compared with everyone else who answered
the same question.

Network conditions only rescale the response time before it is compared
with the question's distribution. They never enter the score formula.

Percentiles use the nearest-rank method on the sorted sample with no
interpolation. That is good enough to bucket students, but it is not a
rigorous estimator and should not be reused for statistics reporting.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple, Union


class EngagementLevel(str, Enum):
    ACTIVE = "Active"
    MODERATE = "Moderate"
    PASSIVE = "Passive"


# ============================================================
# Score weights and thresholds
# ============================================================

CORRECTNESS_WEIGHT = 0.6
SPEED_WEIGHT = 0.4
DIFFICULTY_BONUS = 0.1
HARD_QUESTION_CORRECTNESS = 0.7   # average correctness below this = hard

ACTIVE_THRESHOLD = 0.75
MODERATE_THRESHOLD = 0.45

# Fallback bands (seconds) when a question has no distribution yet
FAST_SECONDS = 15.0
SLOW_SECONDS = 30.0

MIN_PENALTY = 1.0
MAX_PENALTY = 1.5


def _clamp(low: float, high: float, value: float) -> float:
    return max(low, min(high, value))


# ============================================================
# Network condition (absent / RTT only / RTT + jitter)
# ============================================================

@dataclass(frozen=True)
class NoNetworkMetrics:
    def penalty(self) -> float:
        return 1.0


@dataclass(frozen=True)
class RttOnly:
    rtt_ms: float

    def penalty(self) -> float:
        return _clamp(MIN_PENALTY, MAX_PENALTY, 1.0 + rtt_penalty(self.rtt_ms) * 0.6)


@dataclass(frozen=True)
class RttWithJitter:
    rtt_ms: float
    jitter_ms: float

    def penalty(self) -> float:
        combined = (rtt_penalty(self.rtt_ms) + jitter_penalty(self.jitter_ms)) / 2
        return _clamp(MIN_PENALTY, MAX_PENALTY, 1.0 + combined)


NetworkCondition = Union[NoNetworkMetrics, RttOnly, RttWithJitter]


def rtt_penalty(rtt_ms: float) -> float:
    # 0-50ms costs nothing, tops out at 0.5 around 300ms
    return _clamp(0.0, 0.5, (rtt_ms - 50) / 500)


def jitter_penalty(jitter_ms: float) -> float:
    return _clamp(0.0, 0.3, (jitter_ms - 10) / 200)


def network_condition(
    rtt_ms: Optional[float] = None,
    jitter_ms: Optional[float] = None,
) -> NetworkCondition:
    """
    Build the network condition from stored metrics.

    Jitter without RTT carries no usable signal and is treated as absent.
    Zero is a measurement, only None means "not measured".
    """
    if rtt_ms is None:
        return NoNetworkMetrics()
    if jitter_ms is None:
        return RttOnly(rtt_ms=float(rtt_ms))
    return RttWithJitter(rtt_ms=float(rtt_ms), jitter_ms=float(jitter_ms))


# ============================================================
# Per-question distribution
# ============================================================

@dataclass(frozen=True)
class QuestionStats:
    """Response-time distribution (seconds) and average correctness of one question."""
    median_time: float
    p25_time: float
    p75_time: float
    avg_correctness: float
    sample_size: int


def nearest_rank(sorted_values: Sequence[float], percent: float) -> float:
    """Nearest-rank percentile of an already sorted, non-empty sequence."""
    rank = max(1, math.ceil(percent / 100 * len(sorted_values)))
    return sorted_values[rank - 1]


def compute_question_stats(samples: Iterable[Tuple[float, bool]]) -> Optional[QuestionStats]:
    """
    Build stats from (response_time_seconds, is_correct) samples.

    Samples with a non-positive time are ignored for timing but still count
    towards correctness. Returns None when there is no timing data.
    """
    samples = list(samples)
    times = sorted(t for t, _ in samples if t and t > 0)
    if not times:
        return None
    correct = sum(1 for _, ok in samples if ok)
    return QuestionStats(
        median_time=nearest_rank(times, 50),
        p25_time=nearest_rank(times, 25),
        p75_time=nearest_rank(times, 75),
        avg_correctness=correct / len(samples),
        sample_size=len(times),
    )


# ============================================================
# Classification
# ============================================================

@dataclass(frozen=True)
class EngagementResult:
    level: EngagementLevel
    raw_time: float
    adjusted_time: Optional[float] = None
    penalty: float = 1.0
    correctness_score: Optional[float] = None
    speed_score: Optional[float] = None
    difficulty_bonus: float = 0.0
    engagement_score: Optional[float] = None


def speed_score(adjusted_time: float, stats: QuestionStats) -> float:
    if adjusted_time < stats.p25_time:
        return 1.0
    if adjusted_time < stats.median_time:
        return 0.7
    if adjusted_time > stats.p75_time:
        return 0.2
    return 0.4


def _level_for(score: float) -> EngagementLevel:
    if score >= ACTIVE_THRESHOLD:
        return EngagementLevel.ACTIVE
    if score >= MODERATE_THRESHOLD:
        return EngagementLevel.MODERATE
    return EngagementLevel.PASSIVE


def _absolute_level(is_correct: bool, adjusted_time: float) -> EngagementLevel:
    if is_correct:
        return EngagementLevel.ACTIVE if adjusted_time <= SLOW_SECONDS else EngagementLevel.MODERATE
    if adjusted_time < FAST_SECONDS:
        return EngagementLevel.PASSIVE
    if adjusted_time <= SLOW_SECONDS:
        return EngagementLevel.MODERATE
    return EngagementLevel.PASSIVE


def classify(
    is_correct: bool,
    response_time_seconds: Optional[float],
    stats: Optional[QuestionStats] = None,
    network: Optional[NetworkCondition] = None,
) -> EngagementResult:
    """
    Classify one response.

    Args:
        is_correct: stored correctness of the response
        response_time_seconds: raw time the student took
        stats: distribution for the question, None for the first responder
        network: measured network condition, None when nothing was measured
    """
    if not response_time_seconds or response_time_seconds <= 0:
        return EngagementResult(level=EngagementLevel.PASSIVE, raw_time=response_time_seconds or 0.0)

    penalty = (network or NoNetworkMetrics()).penalty()
    adjusted = response_time_seconds / penalty

    if stats is None:
        return EngagementResult(
            level=_absolute_level(is_correct, adjusted),
            raw_time=response_time_seconds,
            adjusted_time=adjusted,
            penalty=penalty,
        )

    correctness = 1.0 if is_correct else 0.0
    speed = speed_score(adjusted, stats)
    bonus = DIFFICULTY_BONUS if is_correct and stats.avg_correctness < HARD_QUESTION_CORRECTNESS else 0.0
    score = CORRECTNESS_WEIGHT * correctness + SPEED_WEIGHT * speed + bonus

    return EngagementResult(
        level=_level_for(score),
        raw_time=response_time_seconds,
        adjusted_time=adjusted,
        penalty=penalty,
        correctness_score=correctness,
        speed_score=speed,
        difficulty_bonus=bonus,
        engagement_score=score,
    )
