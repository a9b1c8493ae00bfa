import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, Optional

from ..config import SchedulerParameters
from ..utils.time import days_between
from . import memory
from .cards import Card, PreviewResult, ReviewLog, ReviewOutcome
from .enums import Rating, State
from .errors import InvalidCardError, InvalidRatingError, SchedulerContractError


class ReviewScheduler:
    """
    Computes the next state of a card from a rating.

    Instances hold nothing but their parameters, so one scheduler can serve
    any number of cards concurrently. Input cards are never modified.
    """

    def __init__(self, parameters: Optional[SchedulerParameters] = None):
        self.parameters = parameters or SchedulerParameters()

    def schedule_review(self, card: Card, rating: Rating, now: datetime) -> ReviewOutcome:
        self._check_rating(rating)
        self._check_card(card)
        self._check_now(now)
        params = self.parameters

        anchor = card.last_review or card.created_at
        elapsed = max(0.0, days_between(anchor, now))

        if card.state == State.NEW:
            difficulty = memory.initial_difficulty(params, rating)
            stability = memory.initial_stability(params, rating)
            state, step, delay = self._step_transition(
                card, State.LEARNING, 0, rating, stability, now
            )
        else:
            retrievability = memory.forgetting_curve(elapsed, card.stability)
            difficulty = memory.next_difficulty(params, card.difficulty, rating)

            if card.state != State.REVIEW and elapsed < 1:
                stability = memory.short_term_stability(params, card.stability, rating)
            elif rating == Rating.AGAIN:
                stability = memory.stability_after_lapse(
                    params, card.stability, difficulty, retrievability
                )
            else:
                stability = memory.stability_after_success(
                    params, card.stability, difficulty, retrievability, rating
                )
            stability = memory.safe_stability(params, stability)

            if card.state == State.REVIEW:
                state, step, delay = self._review_transition(
                    card, rating, stability, retrievability, now
                )
            else:
                state, step, delay = self._step_transition(
                    card, card.state, card.step or 0, rating, stability, now
                )

        scheduled_days = delay.days if state == State.REVIEW else 0
        due = now + delay

        updated = replace(
            card,
            due=due,
            state=state,
            step=step,
            stability=stability,
            difficulty=difficulty,
            elapsed_days=elapsed,
            scheduled_days=scheduled_days,
            reps=card.reps + (0 if rating == Rating.AGAIN else 1),
            lapses=card.lapses + (1 if rating == Rating.AGAIN else 0),
            last_review=now,
        )
        log = ReviewLog(
            card_id=card.id,
            rating=rating,
            state=card.state,
            due=card.due,
            stability=card.stability,
            difficulty=card.difficulty,
            elapsed_days=elapsed,
            last_elapsed_days=card.elapsed_days,
            scheduled_days=scheduled_days,
            review=now,
            new_state=state,
            new_due=due,
        )
        return ReviewOutcome(card=updated, log=log)

    def get_review_previews(self, card: Card, now: datetime) -> Dict[Rating, PreviewResult]:
        previews = {}
        for rating in Rating:
            outcome = self.schedule_review(card, rating, now)
            previews[rating] = PreviewResult(
                rating=rating,
                card=outcome.card,
                log=outcome.log,
                interval=outcome.card.due - now,
            )
        return previews

    def get_retrievability(self, card: Card, now: datetime) -> float:
        """Probability the card is recalled at `now`; 0 for unreviewed cards."""
        if card.state == State.NEW or card.last_review is None:
            return 0.0
        elapsed = max(0.0, days_between(card.last_review, now))
        return memory.forgetting_curve(elapsed, card.stability)

    def next_interval(self, stability: float) -> int:
        return memory.next_interval(self.parameters, stability)

    # ---- transitions ----

    def _step_transition(self, card, state, step, rating, stability, now):
        steps = (
            self.parameters.learning_steps
            if state == State.LEARNING
            else self.parameters.relearning_steps
        )
        if not steps or rating == Rating.EASY:
            return State.REVIEW, None, self._review_delay(card, stability, now)

        step = min(step, len(steps) - 1)
        if rating == Rating.AGAIN:
            return state, 0, steps[0]
        if rating == Rating.HARD:
            if step == 0 and len(steps) == 1:
                return state, 0, steps[0] * 1.5
            if step == 0:
                return state, 0, (steps[0] + steps[1]) / 2
            return state, step, steps[step]

        # GOOD
        if step + 1 >= len(steps):
            return State.REVIEW, None, self._review_delay(card, stability, now)
        return state, step + 1, steps[step + 1]

    def _review_transition(self, card, rating, stability, retrievability, now):
        relearning = self.parameters.relearning_steps
        if rating == Rating.AGAIN:
            if relearning:
                return State.RELEARNING, 0, relearning[0]
            return State.REVIEW, None, self._review_delay(card, stability, now)
        days = self._ordered_review_days(card, retrievability, now)[rating]
        return State.REVIEW, None, timedelta(days=days)

    def _ordered_review_days(self, card, retrievability, now):
        """
        Hard, Good and Easy intervals of a review card, forced into
        strictly increasing order below the maximum interval.
        """
        params = self.parameters
        days = {}
        for rating in (Rating.HARD, Rating.GOOD, Rating.EASY):
            difficulty = memory.next_difficulty(params, card.difficulty, rating)
            stability = memory.safe_stability(
                params,
                memory.stability_after_success(
                    params, card.stability, difficulty, retrievability, rating
                ),
            )
            days[rating] = self._review_days(card, stability, now)

        days[Rating.HARD] = min(days[Rating.HARD], days[Rating.GOOD])
        days[Rating.GOOD] = max(days[Rating.GOOD], days[Rating.HARD] + 1)
        days[Rating.EASY] = max(days[Rating.EASY], days[Rating.GOOD] + 1)
        return {r: min(d, params.maximum_interval) for r, d in days.items()}

    def _review_delay(self, card, stability, now) -> timedelta:
        return timedelta(days=self._review_days(card, stability, now))

    def _review_days(self, card, stability, now) -> int:
        days = memory.next_interval(self.parameters, stability)
        if self.parameters.enable_fuzzing:
            seed = f"{card.id}:{card.reps + card.lapses}:{now.isoformat()}"
            days = memory.fuzz_interval(self.parameters, days, seed)
        return days

    # ---- contract checks ----

    @staticmethod
    def _check_rating(rating):
        if not isinstance(rating, Rating):
            raise InvalidRatingError(f"rating must be a Rating, got {rating!r}")

    @staticmethod
    def _check_now(now):
        if not isinstance(now, datetime) or now.tzinfo is None:
            raise SchedulerContractError(f"now must be a timezone-aware datetime, got {now!r}")

    def _check_card(self, card):
        params = self.parameters
        if not isinstance(card.state, State):
            raise InvalidCardError(f"card {card.id}: unknown state {card.state!r}")
        if card.reps < 0 or card.lapses < 0:
            raise InvalidCardError(f"card {card.id}: negative counters")
        if card.created_at.tzinfo is None or (
            card.last_review is not None and card.last_review.tzinfo is None
        ):
            raise InvalidCardError(f"card {card.id}: naive timestamps")

        if card.state == State.NEW:
            if card.reps != 0 or card.last_review is not None:
                raise InvalidCardError(f"card {card.id}: new card with review history")
            return

        if card.last_review is None:
            raise InvalidCardError(f"card {card.id}: {card.state.name} card without last_review")
        if card.stability is None or not math.isfinite(card.stability) or card.stability <= 0:
            raise InvalidCardError(f"card {card.id}: invalid stability {card.stability!r}")
        if card.difficulty is None or not (
            params.min_difficulty <= card.difficulty <= params.max_difficulty
        ):
            raise InvalidCardError(f"card {card.id}: invalid difficulty {card.difficulty!r}")
