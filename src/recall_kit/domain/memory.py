"""Memory-model formulas for recall_kit.

Pure functions over plain floats. Retrievability follows the power
forgetting curve ``R(t) = (1 + decay_factor * t / S) ^ (-curve_exponent)``;
intervals invert it at the requested retention.
"""

import math
import random

from recall_kit.domain.weights import MemoryWeights, SchedulingParams
from recall_kit.models.memory import Grade

__all__ = [
    "MAX_DIFFICULTY",
    "MIN_DIFFICULTY",
    "MIN_STABILITY",
    "clamp",
    "fuzz_interval",
    "next_difficulty",
    "next_forget_stability",
    "next_interval",
    "next_recall_stability",
    "retrievability",
]

MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
# Floor for stability wherever it is raised to a negative power
MIN_STABILITY = 0.01


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def retrievability(
    elapsed_days: float,
    stability: float,
    params: SchedulingParams,
) -> float:
    """Probability of recall after elapsed_days at the given stability.

    Args:
        elapsed_days: Days since the last review (negative treated as 0)
        stability: Current stability in days
        params: Forgetting-curve shape

    Returns:
        Retrievability in (0, 1]
    """
    t = max(0.0, elapsed_days)
    s = max(stability, MIN_STABILITY)
    return (1.0 + params.decay_factor * t / s) ** (-params.curve_exponent)


def next_difficulty(difficulty: float, grade: Grade, weights: MemoryWeights) -> float:
    """Move difficulty by the grade delta, scaled by the headroom to 10."""
    delta = weights.delta_for(grade)
    updated = difficulty + delta * (MAX_DIFFICULTY - difficulty) / 9.0
    return clamp(updated, MIN_DIFFICULTY, MAX_DIFFICULTY)


def next_recall_stability(
    difficulty: float,
    stability: float,
    r: float,
    grade: Grade,
    weights: MemoryWeights,
) -> float:
    """Stability after a successful recall (Hard, Good or Easy)."""
    s = max(stability, MIN_STABILITY)
    gain = (
        math.exp(weights.w_a)
        * (11.0 - difficulty)
        * s ** (-weights.w_b)
        * (math.exp((1.0 - r) * weights.w_c) - 1.0)
        * weights.bonus_for(grade)
    )
    return s * (1.0 + gain)


def next_forget_stability(
    difficulty: float,
    stability: float,
    r: float,
    weights: MemoryWeights,
) -> float:
    """Stability after a lapse (Again on a reviewed item)."""
    return (
        weights.w_d
        * difficulty ** (-weights.w_e)
        * ((stability + 1.0) ** weights.w_f - 1.0)
        * math.exp(weights.w_g * (1.0 - r))
    )


def next_interval(stability: float, params: SchedulingParams) -> int:
    """Whole-day interval at which retrievability falls to request_retention.

    Clamped to ``[1, maximum_interval]``.
    """
    exact = (stability / params.decay_factor) * (
        params.request_retention ** (-1.0 / params.curve_exponent) - 1.0
    )
    return int(clamp(round(exact), 1, params.maximum_interval))


def fuzz_interval(
    interval: int,
    params: SchedulingParams,
    rng: random.Random,
) -> int:
    """Perturb an interval by a symmetric, bounded random number of days.

    Intervals at or below ``fuzz_threshold_days`` are returned unchanged.
    The shift never exceeds ``fuzz_factor`` of the interval, so short
    intervals may be left as is. The result stays within
    ``[1, maximum_interval]``.
    """
    if not params.enable_fuzz or interval <= params.fuzz_threshold_days:
        return interval
    spread = int(interval * params.fuzz_factor)
    if spread == 0:
        return interval
    fuzzed = interval + rng.randint(-spread, spread)
    return int(clamp(fuzzed, 1, params.maximum_interval))
