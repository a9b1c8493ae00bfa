"""
Memory model formulas.

Stability (S) is measured in days, difficulty (D) lies in the configured
bounds, retrievability (R) is the probability of recall at review time.
Every function here is pure and takes the parameter set explicitly.
"""

import math
import random

from ..config import FUZZ_MIN_DAYS, FUZZ_RANGES
from .enums import Rating


def clamp(value, low, high):
    return max(low, min(high, value))


def forgetting_curve(elapsed_days, stability):
    """R = exp(-t / 9S); R(S) is close to 0.9."""
    return math.exp(-elapsed_days / (9 * stability))


def safe_stability(params, stability):
    if not math.isfinite(stability) or stability < params.min_stability:
        return params.min_stability
    return stability


def initial_stability(params, rating: Rating) -> float:
    return max(params.weights[rating - 1], params.min_stability)


def _raw_initial_difficulty(params, rating: Rating) -> float:
    w = params.weights
    return w[4] - math.exp(w[5] * (rating - 1)) + 1


def initial_difficulty(params, rating: Rating) -> float:
    return clamp(
        _raw_initial_difficulty(params, rating),
        params.min_difficulty,
        params.max_difficulty,
    )


def next_difficulty(params, difficulty: float, rating: Rating) -> float:
    """
    Shift D by a rating-dependent delta, damped as D approaches the upper
    bound, then revert slightly towards the initial difficulty of an Easy
    first rating.
    """
    w = params.weights
    delta = -w[6] * (rating - 3)
    span = params.max_difficulty - params.min_difficulty
    damped = difficulty + delta * (params.max_difficulty - difficulty) / span
    target = _raw_initial_difficulty(params, Rating.EASY)
    reverted = w[7] * target + (1 - w[7]) * damped
    return clamp(reverted, params.min_difficulty, params.max_difficulty)


def short_term_stability(params, stability: float, rating: Rating) -> float:
    """Stability change for a same-day (re)learning step."""
    w = params.weights
    increase = math.exp(w[17] * (rating - 3 + w[18]))
    if rating in (Rating.GOOD, Rating.EASY):
        increase = max(increase, 1.0)
    return stability * increase


def stability_after_success(params, stability, difficulty, retrievability, rating):
    w = params.weights
    hard_penalty = w[15] if rating == Rating.HARD else 1.0
    easy_bonus = w[16] if rating == Rating.EASY else 1.0
    growth = (
        math.exp(w[8])
        * (params.max_difficulty + 1 - difficulty)
        * math.pow(stability, -w[9])
        * (math.exp(w[10] * (1 - retrievability)) - 1)
        * hard_penalty
        * easy_bonus
    )
    return stability * (1 + growth)


def stability_after_lapse(params, stability, difficulty, retrievability):
    w = params.weights
    long_term = (
        w[11]
        * math.pow(difficulty, -w[12])
        * (math.pow(stability + 1, w[13]) - 1)
        * math.exp(w[14] * (1 - retrievability))
    )
    short_term = stability / math.exp(w[17] * w[18])
    # a lapse never grows stability
    return min(long_term, short_term, stability)


def next_interval(params, stability: float) -> int:
    """Days until R drops to the desired retention, capped."""
    days = -9 * stability * math.log(params.desired_retention)
    return int(clamp(round(days), 1, params.maximum_interval))


def fuzz_range(params, interval_days):
    delta = 1.0
    for start, end, factor in FUZZ_RANGES:
        delta += factor * max(min(interval_days, end) - start, 0.0)

    min_ivl = max(2, int(round(interval_days - delta)))
    max_ivl = min(int(round(interval_days + delta)), params.maximum_interval)
    return min(min_ivl, max_ivl), max_ivl


def fuzz_interval(params, interval_days: int, seed: str) -> int:
    """
    Spread intervals so cards added together do not stay bunched.

    The spread is drawn from a generator seeded by the caller, so the same
    review always gets the same interval.
    """
    if interval_days < FUZZ_MIN_DAYS:
        return interval_days
    low, high = fuzz_range(params, interval_days)
    fuzzed = random.Random(seed).random() * (high - low + 1) + low
    return int(min(math.floor(fuzzed), params.maximum_interval))
