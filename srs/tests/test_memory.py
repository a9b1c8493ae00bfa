import math

import pytest

from srs.config import SchedulerParameters
from srs.domain import memory
from srs.domain.enums import Rating

params = SchedulerParameters(enable_fuzzing=False)


def test_forgetting_curve_decays_from_one():
    assert memory.forgetting_curve(0, 10.0) == 1.0
    assert memory.forgetting_curve(10, 10.0) == pytest.approx(math.exp(-1 / 9))
    assert memory.forgetting_curve(20, 10.0) < memory.forgetting_curve(10, 10.0)


def test_initial_tables_are_ordered_by_rating():
    stabilities = [memory.initial_stability(params, r) for r in Rating]
    difficulties = [memory.initial_difficulty(params, r) for r in Rating]

    assert stabilities == sorted(stabilities)
    assert difficulties == sorted(difficulties, reverse=True)
    assert difficulties[0] == pytest.approx(7.1949)


@pytest.mark.parametrize("difficulty", [1.0, 3.0, 5.0, 8.0, 10.0])
def test_next_difficulty_orders_ratings_and_stays_in_bounds(difficulty):
    values = [memory.next_difficulty(params, difficulty, r) for r in Rating]

    for value in values:
        assert params.min_difficulty <= value <= params.max_difficulty
    # AGAIN makes a card harder than EASY does
    assert values[0] >= values[1] >= values[2] >= values[3]


def test_next_difficulty_again_raises_difficulty():
    assert memory.next_difficulty(params, 5.0, Rating.AGAIN) > 5.0
    assert memory.next_difficulty(params, 5.0, Rating.EASY) < 5.0


def test_success_gain_grows_as_retrievability_falls():
    high = memory.stability_after_success(params, 10.0, 5.0, 0.95, Rating.GOOD)
    low = memory.stability_after_success(params, 10.0, 5.0, 0.5, Rating.GOOD)
    assert 10.0 < high < low


def test_success_multipliers_order_hard_good_easy():
    hard, good, easy = (
        memory.stability_after_success(params, 10.0, 5.0, 0.9, r)
        for r in (Rating.HARD, Rating.GOOD, Rating.EASY)
    )
    assert hard < good < easy


def test_lapse_never_grows_stability():
    for stability in (0.5, 3.0, 10.0, 100.0):
        for retrievability in (0.05, 0.5, 0.9, 1.0):
            after = memory.stability_after_lapse(params, stability, 5.0, retrievability)
            assert 0 < after <= stability


def test_short_term_good_never_shrinks():
    assert memory.short_term_stability(params, 2.0, Rating.GOOD) >= 2.0
    assert memory.short_term_stability(params, 2.0, Rating.EASY) >= 2.0
    assert memory.short_term_stability(params, 2.0, Rating.AGAIN) < 2.0


def test_safe_stability_replaces_unusable_values():
    assert memory.safe_stability(params, float("nan")) == params.min_stability
    assert memory.safe_stability(params, float("inf")) == params.min_stability
    assert memory.safe_stability(params, -3.0) == params.min_stability
    assert memory.safe_stability(params, 2.5) == 2.5


def test_next_interval_is_monotonic_and_capped():
    capped = SchedulerParameters(maximum_interval=100)
    intervals = [memory.next_interval(capped, s) for s in (0.01, 0.5, 3, 10, 50, 200, 10_000)]

    assert intervals[0] == 1
    assert intervals == sorted(intervals)
    assert intervals[-1] == 100
    assert memory.next_interval(params, 10.0) == 9


def test_fuzz_leaves_short_intervals_alone():
    assert memory.fuzz_interval(params, 1, "seed") == 1
    assert memory.fuzz_interval(params, 2, "seed") == 2


def test_fuzz_is_seeded():
    first = memory.fuzz_interval(params, 60, "card-1:3:2024-05-01")
    second = memory.fuzz_interval(params, 60, "card-1:3:2024-05-01")
    low, high = memory.fuzz_range(params, 60)

    assert first == second
    assert low <= first <= high


def test_fuzz_stays_inside_its_range():
    low, high = memory.fuzz_range(params, 60)
    assert (low, high) == (55, 65)

    seen = {memory.fuzz_interval(params, 60, str(seed)) for seed in range(2000)}
    assert min(seen) == low
    assert max(seen) == high
