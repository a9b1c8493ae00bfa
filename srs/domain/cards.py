from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .enums import Rating, State


@dataclass(frozen=True)
class Card:
    """
    Scheduling state of a single flashcard.

    stability and difficulty stay None until the first rating; step is the
    position in the (re)learning step table while the card is in
    LEARNING/RELEARNING.
    """

    id: str
    due: datetime
    created_at: datetime
    state: State = State.NEW
    stability: Optional[float] = None
    difficulty: Optional[float] = None
    elapsed_days: float = 0.0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    last_review: Optional[datetime] = None
    step: Optional[int] = None

    @classmethod
    def new(cls, card_id, now: datetime) -> "Card":
        return cls(id=str(card_id), due=now, created_at=now)


@dataclass(frozen=True)
class ReviewLog:
    """One rating event. The snapshot fields hold the values before the review."""

    card_id: str
    rating: Rating
    state: State
    due: datetime
    stability: Optional[float]
    difficulty: Optional[float]
    elapsed_days: float
    last_elapsed_days: float
    scheduled_days: int
    review: datetime
    new_state: State
    new_due: datetime


@dataclass(frozen=True)
class ReviewOutcome:
    card: Card
    log: ReviewLog


@dataclass(frozen=True)
class PreviewResult:
    rating: Rating
    card: Card
    log: ReviewLog
    interval: timedelta

    @property
    def due(self) -> datetime:
        return self.card.due
