from dataclasses import dataclass, fields
from datetime import timedelta
from typing import Tuple

from .domain.errors import InvalidParametersError

# FSRS-5 default weights
DEFAULT_WEIGHTS = (
    0.40255, 1.18385, 3.173, 15.69105,  # initial stability per rating
    7.1949, 0.5345,                     # initial difficulty
    1.4604, 0.0046,                     # difficulty delta, mean reversion
    1.54575, 0.1192, 1.01925,           # stability after success
    1.9395, 0.11, 0.29605, 2.2698,      # stability after lapse
    0.2315, 2.9898,                     # hard penalty, easy bonus
    0.51655, 0.6621,                    # same-day (short-term) stability
)

DESIRED_RETENTION = 0.9
MAX_INTERVAL_DAYS = 36500
LEARNING_STEPS = (timedelta(minutes=1), timedelta(minutes=10))
RELEARNING_STEPS = (timedelta(minutes=10),)

MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
MIN_STABILITY = 0.01

# Fuzz is only applied to review intervals of at least this many days
FUZZ_MIN_DAYS = 2.5
FUZZ_RANGES = (
    # (start, end, factor)
    (2.5, 7.0, 0.15),
    (7.0, 20.0, 0.1),
    (20.0, float("inf"), 0.05),
)


@dataclass(frozen=True)
class SchedulerParameters:
    """
    Algorithm parameters for a ReviewScheduler.

    Supplied once and replaced wholesale; a scheduler never changes its
    parameters after construction.
    """

    weights: Tuple[float, ...] = DEFAULT_WEIGHTS
    desired_retention: float = DESIRED_RETENTION
    maximum_interval: int = MAX_INTERVAL_DAYS
    learning_steps: Tuple[timedelta, ...] = LEARNING_STEPS
    relearning_steps: Tuple[timedelta, ...] = RELEARNING_STEPS
    enable_fuzzing: bool = True
    min_difficulty: float = MIN_DIFFICULTY
    max_difficulty: float = MAX_DIFFICULTY
    min_stability: float = MIN_STABILITY

    def __post_init__(self):
        object.__setattr__(self, "weights", tuple(float(w) for w in self.weights))
        object.__setattr__(self, "learning_steps", tuple(self.learning_steps))
        object.__setattr__(self, "relearning_steps", tuple(self.relearning_steps))

        if len(self.weights) != len(DEFAULT_WEIGHTS):
            raise InvalidParametersError(
                f"expected {len(DEFAULT_WEIGHTS)} weights, got {len(self.weights)}"
            )
        if not 0 < self.desired_retention < 1:
            raise InvalidParametersError(
                f"desired_retention must be in (0, 1), got {self.desired_retention}"
            )
        if self.maximum_interval < 1:
            raise InvalidParametersError("maximum_interval must be at least 1 day")
        if not 0 < self.min_difficulty < self.max_difficulty:
            raise InvalidParametersError("difficulty bounds must satisfy 0 < min < max")
        if self.min_stability <= 0:
            raise InvalidParametersError("min_stability must be positive")
        for step in self.learning_steps + self.relearning_steps:
            if step <= timedelta(0):
                raise InvalidParametersError(f"learning steps must be positive, got {step}")

    @classmethod
    def from_mapping(cls, values):
        """Build parameters from a settings dict; steps may be given in minutes."""
        if not values:
            return cls()
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise InvalidParametersError(f"unknown scheduler parameters: {sorted(unknown)}")

        kwargs = dict(values)
        for key in ("learning_steps", "relearning_steps"):
            if key in kwargs:
                kwargs[key] = tuple(
                    s if isinstance(s, timedelta) else timedelta(minutes=s)
                    for s in kwargs[key]
                )
        return cls(**kwargs)
